"""
Screen-reader heuristics shared by several checks.

These approximate how TalkBack decides what to focus and what to announce,
using only capability flags already resolved on each Element.
"""

from typing import List, Optional

from models import Element

SCROLLABLE_CONTAINER_CLASS_NAMES = (
    'AdapterView', 'ListView', 'GridView', 'ScrollView', 'HorizontalScrollView',
    'RecyclerView', 'NestedScrollView',
)
WEB_VIEW_CLASS_NAMES = ('WebView',)
EDIT_TEXT_CLASS_NAMES = ('EditText', 'AutoCompleteTextView', 'TextInputEditText')
TEXT_VIEW_CLASS_NAMES = (
    'TextView', 'EditText', 'Button', 'CheckBox', 'RadioButton', 'CheckedTextView',
    'AutoCompleteTextView', 'TextInputEditText', 'MaterialButton', 'AppCompatTextView',
    'AppCompatButton', 'Chip', 'DialogTitle',
)
SWITCH_CLASS_NAMES = ('Switch', 'SwitchCompat', 'SwitchMaterial', 'ToggleButton')
IMAGE_VIEW_CLASS_NAMES = ('ImageView', 'ImageButton', 'AppCompatImageView',
                          'AppCompatImageButton', 'FloatingActionButton')


def _non_blank(value: Optional[str]) -> bool:
    return bool(value and value.strip())


def has_text(element: Element) -> bool:
    return (_non_blank(element.text) or _non_blank(element.content_description)
            or _non_blank(element.hint_text))


def is_editable(element: Element) -> bool:
    return element.editable or element.class_name_endswith(*EDIT_TEXT_CLASS_NAMES)


def is_focusable_or_clickable(element: Element) -> bool:
    return (element.visible and element.important_for_accessibility
            and (element.focusable or element.clickable or element.long_clickable))


def important_ancestor(element: Element) -> Optional[Element]:
    for ancestor in element.ancestors():
        if ancestor.important_for_accessibility:
            return ancestor
    return None


def is_child_of_scrollable_container(element: Element) -> bool:
    parent = important_ancestor(element)
    if parent is None:
        return False
    if parent.scrollable:
        return True
    if parent.class_name_endswith('Spinner'):
        return False
    return parent.class_name_endswith(*SCROLLABLE_CONTAINER_CLASS_NAMES)


def is_speaking(element: Element) -> bool:
    if element.important_for_accessibility and (has_text(element) or element.checkable):
        return True
    for child in element.children:
        if child.visible and not is_accessibility_focusable(child) and is_speaking(child):
            return True
    return False


def is_accessibility_focusable(element: Element) -> bool:
    if not element.visible or not element.important_for_accessibility:
        return False
    if is_focusable_or_clickable(element):
        return True
    return is_child_of_scrollable_container(element) and is_speaking(element)


def has_focusable_ancestor(element: Element) -> bool:
    parent = important_ancestor(element)
    while parent is not None:
        if is_accessibility_focusable(parent):
            return True
        parent = important_ancestor(parent)
    return False


def should_focus(element: Element) -> bool:
    """Whether a screen reader would move accessibility focus to ``element``"""
    if not element.visible:
        return False

    if is_accessibility_focusable(element):
        has_important_child = any(
            child.important_for_accessibility for child in element.children)
        return not has_important_child or is_speaking(element)

    return (has_text(element) and element.important_for_accessibility
            and not has_focusable_ancestor(element))


def _state_description(element: Element) -> Optional[str]:
    if element.checkable:
        if element.checked is True:
            return "checked"
        if element.checked is False:
            return "not checked"
    return None


def _label_text(element: Element) -> Optional[str]:
    if not element.important_for_accessibility:
        return None
    if _non_blank(element.content_description):
        return element.content_description
    if _non_blank(element.text):
        return element.text
    return None


def _subtree_speakable_text(element: Element) -> str:
    parts: List[str] = []
    if element.important_for_accessibility:
        state = _state_description(element)
        if state:
            parts.append(state)
        if _non_blank(element.content_description):
            # A content description replaces the whole subtree
            parts.append(element.content_description.strip())
            return ', '.join(parts)
        if _non_blank(element.text):
            parts.append(element.text.strip())

    for child in element.children:
        if not is_focusable_or_clickable(child):
            child_text = _subtree_speakable_text(child)
            if child_text:
                parts.append(child_text)

    if element.important_for_accessibility and _non_blank(element.hint_text):
        parts.append(element.hint_text.strip())
    return ', '.join(parts)


def speakable_text(element: Element) -> str:
    """The text a screen reader would announce when focusing ``element``"""
    text = _subtree_speakable_text(element)
    if element.important_for_accessibility and element.labeled_by is not None:
        hierarchy = element.hierarchy
        label_element = hierarchy.element_by_id(element.labeled_by) if hierarchy else None
        label = _label_text(label_element) if label_element is not None else None
        if label:
            return f"{text}, {label}" if text else label
    return text
