import weakref
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from errors import IndexOutOfRangeError, MalformedHierarchyError


@dataclass(frozen=True)
class Rect:
    """Screen rectangle in pixels, right/bottom exclusive"""
    left: int
    top: int
    right: int
    bottom: int

    @property
    def width(self) -> int:
        return self.right - self.left

    @property
    def height(self) -> int:
        return self.bottom - self.top

    @property
    def is_empty(self) -> bool:
        return self.left >= self.right or self.top >= self.bottom

    def contains(self, other: 'Rect') -> bool:
        """True if ``other`` lies entirely inside this non-empty rect"""
        return (not self.is_empty
                and self.left <= other.left and self.top <= other.top
                and self.right >= other.right and self.bottom >= other.bottom)

    def to_short_string(self) -> str:
        return f"[{self.left},{self.top}][{self.right},{self.bottom}]"

    def as_tuple(self) -> Tuple[int, int, int, int]:
        return (self.left, self.top, self.right, self.bottom)


EMPTY_RECT = Rect(0, 0, 0, 0)

SPAN_URL = "url"
SPAN_CLICKABLE = "clickable"

# Units an app can declare a text size in
TEXT_SIZE_UNITS = ("px", "dip", "sp", "pt", "in", "mm")


@dataclass(frozen=True)
class ClickableSpan:
    """
    A tappable range of an element's text, character offsets end-exclusive.

    ``kind`` is ``"url"`` for a link span (``url`` may still be missing)
    or ``"clickable"`` for a span that runs app code when tapped.
    """
    start: int
    end: int
    kind: str = SPAN_URL
    url: Optional[str] = None

    def text_of(self, text: Optional[str]) -> str:
        return (text or "")[self.start:self.end]


@dataclass(frozen=True, eq=False)
class Element:
    """
    One node of a UI snapshot.

    Elements are built bottom-up (children first) and frozen. The parent
    back-reference is weak and is attached once by ``Hierarchy.build``.
    Identity, not value, is used for equality.
    """
    element_id: int
    class_name: Optional[str] = None
    text: Optional[str] = None
    content_description: Optional[str] = None
    test_tag: Optional[str] = None
    hint_text: Optional[str] = None
    bounds: Rect = EMPTY_RECT
    visible: bool = True
    enabled: bool = True
    clickable: bool = False
    long_clickable: bool = False
    focusable: bool = False
    focused: bool = False
    checkable: bool = False
    checked: Optional[bool] = None
    scrollable: bool = False
    editable: bool = False
    important_for_accessibility: bool = True
    text_color: Optional[int] = None
    background_color: Optional[int] = None
    text_size: Optional[float] = None
    text_size_unit: Optional[str] = None
    text_bold: bool = False
    clickable_spans: Tuple[ClickableSpan, ...] = ()
    labeled_by: Optional[int] = None
    traversal_before: Optional[int] = None
    traversal_after: Optional[int] = None
    children: Tuple['Element', ...] = ()
    _parent_ref: Optional[weakref.ReferenceType] = field(
        default=None, init=False, repr=False, compare=False)
    _hierarchy_ref: Optional[weakref.ReferenceType] = field(
        default=None, init=False, repr=False, compare=False)

    def __post_init__(self):
        # Accept any sequence of children but store an immutable tuple
        if not isinstance(self.children, tuple):
            object.__setattr__(self, 'children', tuple(self.children))
        if not isinstance(self.clickable_spans, tuple):
            object.__setattr__(self, 'clickable_spans', tuple(self.clickable_spans))

    def child_count(self) -> int:
        return len(self.children)

    def child_at(self, index: int) -> 'Element':
        if not 0 <= index < len(self.children):
            raise IndexOutOfRangeError(
                f"Child index {index} out of range [0, {len(self.children)}) "
                f"for element {self.element_id}")
        return self.children[index]

    def iter_children(self) -> Iterator['Element']:
        return iter(self.children)

    @property
    def parent(self) -> Optional['Element']:
        return self._parent_ref() if self._parent_ref is not None else None

    @property
    def hierarchy(self) -> Optional['Hierarchy']:
        return self._hierarchy_ref() if self._hierarchy_ref is not None else None

    def ancestors(self) -> Iterator['Element']:
        current = self.parent
        while current is not None:
            yield current
            current = current.parent

    def self_and_descendants(self) -> List['Element']:
        """Pre-order list of this element and its whole subtree"""
        result: List[Element] = []
        stack = [self]
        while stack:
            element = stack.pop()
            result.append(element)
            stack.extend(reversed(element.children))
        return result

    def class_name_endswith(self, *simple_names: str) -> bool:
        """Match the class name by its last dotted component"""
        if not self.class_name:
            return False
        simple = self.class_name.rsplit('.', 1)[-1]
        return simple in simple_names


@dataclass(frozen=True)
class DisplayInfo:
    """Display metrics and platform level of the device at snapshot time"""
    density: float = 1.0
    width_px: Optional[int] = None
    height_px: Optional[int] = None
    orientation: str = "portrait"
    sdk_version: Optional[int] = None

    def px_to_dp(self, px: float) -> int:
        return int(round(px / self.density))


@dataclass(frozen=True, eq=False)
class Window:
    window_id: int
    root: Element
    active: bool = False
    window_type: str = "application"
    bounds: Optional[Rect] = None

    def all_elements(self) -> List[Element]:
        return self.root.self_and_descendants()


def _validate_display(display: DisplayInfo) -> None:
    if not display.density > 0:
        raise MalformedHierarchyError(f"Display density must be positive, got {display.density}")
    for name in ('width_px', 'height_px'):
        value = getattr(display, name)
        if value is not None and value <= 0:
            raise MalformedHierarchyError(f"Display {name} must be positive, got {value}")


class Hierarchy:
    """
    Immutable snapshot of every window on screen plus display metadata.

    Use ``Hierarchy.build`` so that structural invariants are validated and
    parent references are attached.
    """

    def __init__(self, windows: Sequence[Window], display: DisplayInfo, locale: str = "en"):
        self._windows = tuple(windows)
        self._display = display
        self._locale = locale
        self._by_id: Dict[int, Element] = {}
        self._window_by_element_id: Dict[int, Window] = {}
        self._active: Optional[Window] = None

    @classmethod
    def build(cls, windows: Sequence[Window],
              display: Optional[DisplayInfo] = None, locale: str = "en") -> 'Hierarchy':
        """
        Validate the windows and wire parent references.

        Raises:
            MalformedHierarchyError: on a shared or cyclic node, a duplicate
                element id, inverted bounds, an element that already belongs
                to another live hierarchy, invalid display metrics, or not
                exactly one active window
        """
        if not windows:
            raise MalformedHierarchyError("A hierarchy needs at least one window")
        display = display or DisplayInfo()
        _validate_display(display)
        hierarchy = cls(windows, display, locale)

        active = [window for window in hierarchy._windows if window.active]
        if len(active) != 1:
            raise MalformedHierarchyError(
                f"Expected exactly one active window, found {len(active)}")
        hierarchy._active = active[0]

        # Validate everything before touching any element
        seen_nodes = set()
        links: List[Tuple[Element, Optional[Element], Window]] = []
        for window in hierarchy._windows:
            stack: List[Tuple[Element, Optional[Element]]] = [(window.root, None)]
            while stack:
                element, parent = stack.pop()
                if id(element) in seen_nodes:
                    raise MalformedHierarchyError(
                        f"Element {element.element_id} is reachable more than once")
                seen_nodes.add(id(element))
                if element.element_id in hierarchy._by_id:
                    raise MalformedHierarchyError(
                        f"Duplicate element id {element.element_id}")
                if element.bounds.width < 0 or element.bounds.height < 0:
                    raise MalformedHierarchyError(
                        f"Element {element.element_id} has inverted bounds "
                        f"{element.bounds.to_short_string()}")
                if element.hierarchy is not None:
                    raise MalformedHierarchyError(
                        f"Element {element.element_id} already belongs to another hierarchy")
                hierarchy._by_id[element.element_id] = element
                links.append((element, parent, window))
                for child in element.children:
                    stack.append((child, element))

        hierarchy_ref = weakref.ref(hierarchy)
        for element, parent, window in links:
            hierarchy._window_by_element_id[element.element_id] = window
            object.__setattr__(element, '_parent_ref',
                               weakref.ref(parent) if parent is not None else None)
            object.__setattr__(element, '_hierarchy_ref', hierarchy_ref)
        return hierarchy

    @property
    def windows(self) -> Tuple[Window, ...]:
        return self._windows

    @property
    def display(self) -> DisplayInfo:
        return self._display

    @property
    def locale(self) -> str:
        return self._locale

    @property
    def active_window(self) -> Window:
        if self._active is None:
            raise MalformedHierarchyError("Hierarchy was not built with Hierarchy.build")
        return self._active

    def all_elements(self) -> List[Element]:
        """Every element in window order, each window in pre-order"""
        elements: List[Element] = []
        for window in self._windows:
            elements.extend(window.all_elements())
        return elements

    def element_by_id(self, element_id: Optional[int]) -> Optional[Element]:
        if element_id is None:
            return None
        return self._by_id.get(element_id)

    def window_of(self, element: Element) -> Optional[Window]:
        return self._window_by_element_id.get(element.element_id)

    def __len__(self) -> int:
        return len(self._by_id)
