import base64
import binascii
import io
import logging
from typing import List, Tuple

import cv2
import numpy as np
from PIL import Image, UnidentifiedImageError
from sklearn.cluster import KMeans

from accessibility_check import ColorSample
from color_utils import perceptual_difference, rgb
from errors import DataUnavailableError
from models import Rect

logger = logging.getLogger(__name__)


class ScreenshotColorSource:
    """
    Color source backed by a screenshot.

    Samples the dominant colors inside an element's bounds with K-means
    clustering. The largest cluster is taken as the background and the
    remaining clusters as foreground colors, largest first. A region of a
    single color yields a sample without foreground colors.
    """

    def __init__(self, screenshot: np.ndarray, max_colors: int = 3,
                 min_color_difference: float = 2.3, min_foreground_fraction: float = 0.01,
                 max_sample_pixels: int = 20000):
        """
        Args:
            screenshot: BGR image as an (height, width, 3) uint8 array
            max_colors: Upper bound on the number of clusters per element
            min_color_difference: CIE94 distance under which a foreground
                cluster is treated as part of the background
            min_foreground_fraction: Share of pixels a cluster needs to be
                reported as a foreground color
            max_sample_pixels: Larger regions are subsampled to this size
        """
        if screenshot.ndim != 3 or screenshot.shape[2] != 3:
            raise ValueError(f"Expected a BGR image, got shape {screenshot.shape}")
        self.screenshot = screenshot
        self.MAX_COLORS = max_colors
        self.MIN_COLOR_DIFFERENCE = min_color_difference
        self.MIN_FOREGROUND_FRACTION = min_foreground_fraction
        self.MAX_SAMPLE_PIXELS = max_sample_pixels

    @classmethod
    def from_base64(cls, base64_screenshot: str, **kwargs) -> 'ScreenshotColorSource':
        """Convert a base64 screenshot to an OpenCV image"""
        try:
            img_data = base64.b64decode(base64_screenshot)
            img = Image.open(io.BytesIO(img_data)).convert('RGB')
        except (binascii.Error, UnidentifiedImageError, OSError) as e:
            logger.error(f"Failed to decode screenshot: {str(e)}")
            raise ValueError(f"Failed to decode screenshot: {e}") from e
        return cls(cv2.cvtColor(np.array(img), cv2.COLOR_RGB2BGR), **kwargs)

    @property
    def size(self) -> Tuple[int, int]:
        """(width, height) in pixels"""
        height, width = self.screenshot.shape[:2]
        return width, height

    def sample(self, bounds: Rect) -> ColorSample:
        width, height = self.size
        if bounds.is_empty:
            raise DataUnavailableError(f"Bounds {bounds.to_short_string()} are empty")
        if bounds.left < 0 or bounds.top < 0 or bounds.right > width or bounds.bottom > height:
            raise DataUnavailableError(
                f"Bounds {bounds.to_short_string()} fall outside the {width}x{height} screenshot")

        region = self.screenshot[bounds.top:bounds.bottom, bounds.left:bounds.right]
        pixels = region.reshape(-1, 3)
        colors, counts = self._find_dominant_colors(pixels)

        background = colors[0]
        foregrounds = [color for color, count in zip(colors[1:], counts[1:])
                       if count / sum(counts) >= self.MIN_FOREGROUND_FRACTION
                       and perceptual_difference(color, background) >= self.MIN_COLOR_DIFFERENCE]
        if not foregrounds:
            logger.debug(f"Region {bounds.to_short_string()} has a uniform color")
        return ColorSample(foreground_colors=tuple(foregrounds), background_color=background)

    def _find_dominant_colors(self, pixels: np.ndarray) -> Tuple[List[int], List[int]]:
        """
        Find dominant colors in the pixels using K-means clustering.

        Returns colors as opaque ARGB ints with their pixel counts, most
        frequent first.
        """
        unique = np.unique(pixels, axis=0)
        if len(unique) < 2:
            blue, green, red = (int(c) for c in unique[0])
            return [rgb(red, green, blue)], [len(pixels)]

        if len(pixels) > self.MAX_SAMPLE_PIXELS:
            rng = np.random.default_rng(0)
            pixels = pixels[rng.choice(len(pixels), self.MAX_SAMPLE_PIXELS, replace=False)]

        n_colors = min(self.MAX_COLORS, len(unique))
        kmeans = KMeans(n_clusters=n_colors, n_init=10, random_state=0)
        labels = kmeans.fit_predict(pixels.astype(np.float64))
        counts = np.bincount(labels, minlength=n_colors)

        order = np.argsort(-counts, kind='stable')
        colors = []
        for index in order:
            blue, green, red = (int(round(c)) for c in kmeans.cluster_centers_[index])
            colors.append(rgb(_clamp(red), _clamp(green), _clamp(blue)))
        return colors, [int(counts[index]) for index in order]


def _clamp(value: int) -> int:
    return max(0, min(255, value))
