"""
Check contract, per-run parameters, the check registry and presets.

A check is a stateless object with one entry point, ``run``. The same
instance can be reused across hierarchies and invoked from several threads
at once; all per-run state lives in locals and in ``CheckParameters``.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Protocol, Tuple

from check_results import CheckResult, ResultType
from color_utils import contrast_ratio
from models import Element, Hierarchy, Rect

logger = logging.getLogger(__name__)


class CheckCategory(str, Enum):
    CONTENT_LABELING = "labeling"
    TOUCH_TARGET_SIZE = "touch target"
    LOW_CONTRAST = "contrast"
    IMPLEMENTATION = "implementation"


@dataclass(frozen=True)
class ColorSample:
    """Dominant colors observed inside an element's bounds"""
    foreground_colors: Tuple[int, ...]
    background_color: int

    @property
    def contrast_ratios(self) -> Tuple[float, ...]:
        return tuple(contrast_ratio(fg, self.background_color) for fg in self.foreground_colors)


class ColorSource(Protocol):
    """
    Pixel accessor supplied by the caller.

    ``sample`` returns the dominant colors under ``bounds`` (no foreground
    colors when the region is a single color) or raises
    ``errors.DataUnavailableError``.
    """

    def sample(self, bounds: Rect) -> ColorSample:
        ...


@dataclass(frozen=True)
class CheckParameters:
    color_source: Optional[ColorSource] = None
    custom_touch_target_size: Optional[int] = None
    custom_text_contrast_ratio: Optional[float] = None
    custom_image_contrast_ratio: Optional[float] = None


# Messages shared by many checks
MESSAGE_NOT_VISIBLE = "This item is not visible."
MESSAGE_NOT_IMPORTANT = "This item is not important for accessibility."


class AccessibilityCheck(ABC):
    """
    Base class of every check.

    Subclasses set ``check_id``, ``title``, ``category`` and ``messages``
    (reason code -> message template formatted with the result metadata)
    and implement ``run_check``.
    """

    check_id: str = ""
    title: str = ""
    category: CheckCategory = CheckCategory.IMPLEMENTATION
    version: str = "1.0"
    messages: Dict[int, str] = {}

    def run(self, hierarchy: Hierarchy, parameters: Optional[CheckParameters] = None,
            from_root: Optional[Element] = None) -> List[CheckResult]:
        """Evaluate the hierarchy (or the subtree under ``from_root``)"""
        return list(self.run_check(hierarchy, parameters or CheckParameters(), from_root))

    @abstractmethod
    def run_check(self, hierarchy: Hierarchy, parameters: CheckParameters,
                  from_root: Optional[Element]) -> Iterable[CheckResult]:
        ...

    @staticmethod
    def elements_to_evaluate(hierarchy: Hierarchy,
                             from_root: Optional[Element]) -> List[Element]:
        if from_root is not None:
            return from_root.self_and_descendants()
        return hierarchy.active_window.all_elements()

    def result(self, result_type: ResultType, element: Optional[Element], result_id: int,
               **metadata: Any) -> CheckResult:
        return CheckResult(
            check_id=self.check_id,
            result_type=result_type,
            message=self.message_for(result_id, metadata),
            element_id=element.element_id if element is not None else None,
            result_id=result_id,
            metadata=metadata,
        )

    def message_for(self, result_id: int, metadata: Dict[str, Any]) -> str:
        template = self.messages.get(result_id)
        if template is None:
            raise KeyError(f"{self.check_id} has no message for result id {result_id}")
        return template.format(**metadata)

    def __repr__(self):
        return f"<{type(self).__name__} {self.check_id!r}>"


class CheckRegistry:
    """Checks indexed by id, remembering registration order"""

    def __init__(self):
        self._checks: Dict[str, AccessibilityCheck] = {}

    def register(self, check: AccessibilityCheck) -> AccessibilityCheck:
        if not check.check_id:
            raise ValueError(f"{type(check).__name__} has no check_id")
        if check.check_id in self._checks:
            raise ValueError(f"Check {check.check_id!r} is already registered")
        self._checks[check.check_id] = check
        logger.debug(f"Registered check {check.check_id}")
        return check

    def get(self, check_id: str) -> AccessibilityCheck:
        try:
            return self._checks[check_id]
        except KeyError:
            raise KeyError(f"Unknown check id {check_id!r}") from None

    def ids(self) -> Tuple[str, ...]:
        return tuple(self._checks)

    def __iter__(self):
        return iter(self._checks.values())

    def __contains__(self, check_id: str) -> bool:
        return check_id in self._checks

    def __len__(self) -> int:
        return len(self._checks)

    def checks_for(self, check_ids: Iterable[str]) -> List[AccessibilityCheck]:
        """Resolve ids to checks, deduplicated and in registration order"""
        wanted = set()
        for check_id in check_ids:
            self.get(check_id)
            wanted.add(check_id)
        return [check for check_id, check in self._checks.items() if check_id in wanted]

    def checks_for_preset(self, preset: 'AccessibilityCheckPreset') -> List[AccessibilityCheck]:
        return self.checks_for(check_ids_for_preset(preset))


REGISTRY = CheckRegistry()


def register_check(cls):
    """Class decorator that registers one instance of the check"""
    REGISTRY.register(cls())
    return cls


class AccessibilityCheckPreset(str, Enum):
    NO_CHECKS = "NO_CHECKS"
    VERSION_1_0 = "VERSION_1_0"
    VERSION_2_0 = "VERSION_2_0"
    VERSION_3_0 = "VERSION_3_0"
    LATEST = "LATEST"
    PRERELEASE = "PRERELEASE"


_VERSION_1_0_IDS = (
    "speakable_text_present",
    "editable_content_desc",
    "touch_target_size",
    "duplicate_speakable_text",
    "text_contrast",
)
_VERSION_2_0_IDS = _VERSION_1_0_IDS + (
    "clickable_span",
    "duplicate_clickable_bounds",
    "redundant_description",
)
_VERSION_3_0_IDS = _VERSION_2_0_IDS + (
    "image_contrast",
    "class_name",
    "traversal_order",
)
_LATEST_IDS = _VERSION_3_0_IDS + (
    "single_input_focus",
)
# Outside every stable preset
_PRERELEASE_IDS = _LATEST_IDS + (
    "link_purpose_unclear",
    "text_size",
)

_PRESET_CHECK_IDS: Dict[AccessibilityCheckPreset, Tuple[str, ...]] = {
    AccessibilityCheckPreset.NO_CHECKS: (),
    AccessibilityCheckPreset.VERSION_1_0: _VERSION_1_0_IDS,
    AccessibilityCheckPreset.VERSION_2_0: _VERSION_2_0_IDS,
    AccessibilityCheckPreset.VERSION_3_0: _VERSION_3_0_IDS,
    AccessibilityCheckPreset.LATEST: _LATEST_IDS,
    AccessibilityCheckPreset.PRERELEASE: _PRERELEASE_IDS,
}


def check_ids_for_preset(preset) -> Tuple[str, ...]:
    """Check ids in a preset; accepts the enum or its name"""
    if isinstance(preset, str) and not isinstance(preset, AccessibilityCheckPreset):
        try:
            preset = AccessibilityCheckPreset[preset.upper()]
        except KeyError:
            raise ValueError(f"Unknown preset {preset!r}") from None
    return _PRESET_CHECK_IDS[preset]


def resolve_checks(selection, registry: Optional[CheckRegistry] = None) -> List[AccessibilityCheck]:
    """Turn a preset (enum or name) or a sequence of check ids into checks"""
    if registry is None:
        registry = REGISTRY
    if isinstance(selection, (AccessibilityCheckPreset, str)):
        return registry.checks_for(check_ids_for_preset(selection))
    return registry.checks_for(selection)
