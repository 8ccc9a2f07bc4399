"""Exception types raised by the accessibility check engine."""


class AccessibilityCheckError(Exception):
    """Base class for every error raised by the check engine"""


class InvalidArgumentError(AccessibilityCheckError, ValueError):
    """Malformed numeric or color input, e.g. a negative luminance"""


class IndexOutOfRangeError(AccessibilityCheckError, IndexError):
    """Element navigation outside of [0, child_count())"""


class DataUnavailableError(AccessibilityCheckError):
    """A collaborator could not supply data for a single element.

    Checks recover from this locally by emitting a NOT_RUN result for the
    element; it never escapes a check run.
    """


class MalformedHierarchyError(AccessibilityCheckError):
    """The snapshot violates a structural invariant (cycle, duplicate id, ...)"""
