"""
Color math used by the contrast checks.

Colors are packed 32-bit ARGB integers (0xAARRGGBB). All functions are pure.
Luminance and contrast follow WCAG 2.1:
https://www.w3.org/WAI/GL/wiki/Relative_luminance
"""

import math
import re
from typing import Tuple

from errors import InvalidArgumentError

BLACK = 0xFF000000
WHITE = 0xFFFFFFFF
TRANSPARENT = 0x00000000

# The color used to censor secure windows from screen capture
COLOR_SECURE_WINDOW_CENSOR = BLACK

CONTRAST_RATIO_WCAG_NORMAL_TEXT = 4.5
CONTRAST_RATIO_WCAG_LARGE_TEXT = 3.0

# Text sizes (sp) considered large, from
# http://www.w3.org/TR/UNDERSTANDING-WCAG20/visual-audio-contrast-contrast.html
WCAG_LARGE_TEXT_MIN_SIZE = 18
WCAG_LARGE_BOLD_TEXT_MIN_SIZE = 14

# Ratios closer than this to the requirement are not reported
CONTRAST_TOLERANCE = 0.01

# D65 / 2 degree observer
REFERENCE_WHITE = (0.95047, 1.00000, 1.08883)

_HEX_COLOR = re.compile(r'^#?([0-9a-fA-F]{6}|[0-9a-fA-F]{8})$')


def alpha(color: int) -> int:
    return (color >> 24) & 0xFF


def red(color: int) -> int:
    return (color >> 16) & 0xFF


def green(color: int) -> int:
    return (color >> 8) & 0xFF


def blue(color: int) -> int:
    return color & 0xFF


def argb(a: int, r: int, g: int, b: int) -> int:
    """Pack channels into an ARGB int, rejecting values outside 0..255"""
    for value in (a, r, g, b):
        if not 0 <= value <= 255:
            raise InvalidArgumentError(f"Color channel out of range: {value}")
    return (a << 24) | (r << 16) | (g << 8) | b


def rgb(r: int, g: int, b: int) -> int:
    return argb(255, r, g, b)


def is_opaque(color: int) -> bool:
    return alpha(color) == 255


def parse_color(value: str) -> int:
    """
    Parse '#RRGGBB' or '#AARRGGBB' into an ARGB int.

    Six digit values are treated as fully opaque.
    """
    match = _HEX_COLOR.match(value.strip()) if value else None
    if not match:
        raise InvalidArgumentError(f"Not a hex color: {value!r}")
    digits = match.group(1)
    if len(digits) == 6:
        digits = 'FF' + digits
    return int(digits, 16)


def to_hex_string(color: int) -> str:
    """'#RRGGBB' for opaque colors, '#AARRGGBB' otherwise"""
    if is_opaque(color):
        return f"#{color & 0xFFFFFF:06X}"
    return f"#{color & 0xFFFFFFFF:08X}"


def linearize(component: int) -> float:
    """sRGB gamma decoding of one 0..255 channel into [0, 1]"""
    srgb = component / 255.0
    if srgb <= 0.03928:
        return srgb / 12.92
    return ((srgb + 0.055) / 1.055) ** 2.4


def relative_luminance(color: int) -> float:
    r = linearize(red(color))
    g = linearize(green(color))
    b = linearize(blue(color))
    return 0.2126 * r + 0.7152 * g + 0.0722 * b


def contrast_ratio_from_luminance(lum1: float, lum2: float) -> float:
    """
    Contrast ratio of two order-independent luminance values.

    Raises:
        InvalidArgumentError: if either luminance is negative
    """
    if lum1 < 0.0 or lum2 < 0.0:
        raise InvalidArgumentError("Luminance values may not be negative.")
    return (max(lum1, lum2) + 0.05) / (min(lum1, lum2) + 0.05)


def contrast_ratio(color1: int, color2: int) -> float:
    """Contrast ratio in [1, 21] between two colors; alpha is ignored"""
    return contrast_ratio_from_luminance(
        relative_luminance(color1), relative_luminance(color2))


def composite_over(foreground: int, background: int) -> int:
    """
    Blend ``foreground`` over an opaque ``background`` using the
    foreground's alpha. The result is fully opaque.
    """
    fg_alpha = alpha(foreground)

    def blend(fg: int, bg: int) -> int:
        return int(round((fg * fg_alpha + bg * (255 - fg_alpha)) / 255.0))

    return argb(
        255,
        blend(red(foreground), red(background)),
        blend(green(foreground), green(background)),
        blend(blue(foreground), blue(background)),
    )


def contrast_ratio_range(foreground: int, background: int) -> Tuple[float, float]:
    """
    Estimate the (min, max) contrast ratio of ``foreground`` against a
    possibly translucent ``background``.

    Whatever lies behind the background is unknown, so the background is
    composited over solid black and over solid white and the foreground is
    compared with both. This assumes the real backdrop is no more extreme
    than pure black or pure white. For an opaque background both values
    equal ``contrast_ratio(foreground, background)``.
    """
    fg_lum = relative_luminance(foreground)
    lum_on_black = relative_luminance(composite_over(background, BLACK))
    lum_on_white = relative_luminance(composite_over(background, WHITE))
    ratio_on_black = contrast_ratio_from_luminance(fg_lum, lum_on_black)
    ratio_on_white = contrast_ratio_from_luminance(fg_lum, lum_on_white)

    if fg_lum < lum_on_black and fg_lum < lum_on_white:
        minimum = ratio_on_black
    elif fg_lum > lum_on_black and fg_lum > lum_on_white:
        minimum = ratio_on_white
    else:
        # Some backdrop between black and white matches the foreground
        minimum = 1.0
    return minimum, max(ratio_on_black, ratio_on_white)


def rgb_to_lab(color: int) -> Tuple[float, float, float]:
    """Convert an sRGB color to CIE L*a*b* through CIE XYZ"""
    r = linearize(red(color))
    g = linearize(green(color))
    b = linearize(blue(color))
    x = (r * 0.4124 + g * 0.3576 + b * 0.1805) / REFERENCE_WHITE[0]
    y = (r * 0.2126 + g * 0.7152 + b * 0.0722) / REFERENCE_WHITE[1]
    z = (r * 0.0193 + g * 0.1192 + b * 0.9505) / REFERENCE_WHITE[2]

    def companding(t: float) -> float:
        if t > 0.008856:
            return t ** (1.0 / 3.0)
        return 7.787 * t + 16.0 / 116.0

    x, y, z = companding(x), companding(y), companding(z)
    return 116.0 * y - 16.0, 500.0 * (x - y), 200.0 * (y - z)


def perceptual_difference(color1: int, color2: int) -> float:
    """CIE94 Delta E between two colors (graphic arts weighting)"""
    l1, a1, b1 = rgb_to_lab(color1)
    l2, a2, b2 = rgb_to_lab(color2)

    delta_l = l1 - l2
    delta_a = a1 - a2
    delta_b = b1 - b2
    c1 = math.hypot(a1, b1)
    c2 = math.hypot(a2, b2)
    delta_c = c1 - c2
    delta_h = math.sqrt(max(0.0, delta_a * delta_a + delta_b * delta_b - delta_c * delta_c))
    sc = 1.0 + 0.045 * c1
    sh = 1.0 + 0.015 * c1
    return math.sqrt(delta_l ** 2 + (delta_c / sc) ** 2 + (delta_h / sh) ** 2)
