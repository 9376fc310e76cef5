"""
Iteration-count to color mapping with manual and automatic scaling.

The PaletteMapper turns a generator's iteration buffer into RGB pixels. It
owns the palette definition and the interpolated color ramp, which is only
rebuilt when the palette, its size or its control points change.

Autoscale looks at the histogram of iteration counts and picks the ramp
offset and size so the colors cover the range of counts actually present
in the view, ignoring the slowest-escaping 0.5% of pixels.
"""

import logging

import numpy as np

from .compute import apply_palette, calc_histogram
from .palette import Palette, get_palette

logger = logging.getLogger(__name__)


AUTOSCALE_PER_MILLE = 5  # Escape-time outliers left out of the ramp


def calc_autoscale(histogram, pixel_count, min_size=8):
    """
    Compute (offset, size) that fit the ramp to an iteration histogram.

    The offset is minus the smallest iteration value present. The ramp end
    is found by scanning down from the second-highest bucket (the top bucket
    holds pixels in the set) until 0.5% of all pixels have been counted.

    Args:
        histogram: Pixel counts per iteration value; the last entry is the
            in-set bucket
        pixel_count: Total number of pixels (width * height)
        min_size: Smallest ramp size to return

    Returns:
        (offset, size) tuple
    """
    min_val = 0
    for i in range(len(histogram)):
        if histogram[i] > 0:
            min_val = i
            break

    threshold = (AUTOSCALE_PER_MILLE * pixel_count) // 1000
    cumulative = 0
    max_val = 0
    for i in range(len(histogram) - 2, -1, -1):
        cumulative += int(histogram[i])
        if cumulative >= threshold:
            max_val = i
            break

    return -min_val, max(max_val - min_val, min_size)


class PaletteMapper:
    """
    Maps iteration counts to colors through a cyclic ramp.

    Usage:
        mapper = PaletteMapper('Sunset', size=64)
        rgb = mapper.map_frame(generator.iteration_buffer(), generator.max_iters)

    Attributes:
        size: Number of colors in the ramp (>= MIN_SIZE)
        offset: Cyclic rotation applied to iteration counts
        set_color: Color of pixels that never escaped
    """

    DEFAULT_SIZE = 64
    MIN_SIZE = 8

    def __init__(self, palette='Sunset', size=None, set_color=(0, 0, 0)):
        self._palette = self._as_palette(palette)
        self.size = max(int(size or self.DEFAULT_SIZE), self.MIN_SIZE)
        self.offset = 0
        self.set_color = tuple(set_color)
        self._colors = None
        self._stale = True
        self._autoscale = False

    @staticmethod
    def _as_palette(palette):
        if isinstance(palette, Palette):
            return palette.copy()
        if isinstance(palette, str):
            return get_palette(palette)
        return Palette(palette)

    @property
    def palette(self):
        return self._palette

    @property
    def autoscale_pending(self):
        return self._autoscale

    def set_palette(self, palette):
        """Replace the palette (Palette, control points or preset name)."""
        self._palette = self._as_palette(palette)
        self._stale = True

    def set_size(self, size):
        """Set the ramp length, clamped to MIN_SIZE."""
        self.size = max(int(size), self.MIN_SIZE)
        self._stale = True

    def set_offset(self, offset):
        self.offset = int(offset)

    def shift(self, delta):
        """Rotate the ramp by delta entries."""
        self.offset += int(delta)

    def scale(self, delta):
        """Grow or shrink the ramp by delta entries."""
        self.set_size(self.size + int(delta))

    def set_set_color(self, color):
        self.set_color = tuple(int(c) for c in color)

    def invert(self):
        """Photographic negative of the palette."""
        self._palette.invert()
        self._stale = True

    def reverse(self):
        """Run the palette in the opposite direction."""
        self._palette.reverse()
        self._stale = True

    def request_autoscale(self):
        """Fit offset and size to the histogram at the next map_frame()."""
        self._autoscale = True

    def ramp(self):
        """The interpolated color ramp, rebuilt if stale."""
        if self._stale or self._colors is None:
            # Cleared first so a change made during the rebuild marks it stale again
            self._stale = False
            palette, size = self._palette, self.size
            self._colors = palette.create_interpolation(size)
        return self._colors

    def map_frame(self, iteration_buffer, escape_threshold, in_set_color=None,
                  out=None, histogram=None):
        """
        Color a frame of iteration counts.

        Args:
            iteration_buffer: Flat row-major iteration counts
            escape_threshold: Count that marks a pixel as inside the set
            in_set_color: Color for in-set pixels (default: self.set_color)
            out: Optional caller-owned buffer with room for N RGB pixels
            histogram: Optional precomputed histogram for autoscale

        Returns:
            (N, 3) uint8 array (a view of `out` when given)
        """
        iters = np.asarray(iteration_buffer).ravel()

        if self._autoscale:
            if histogram is None:
                histogram = calc_histogram(iters, escape_threshold)
            offset, size = calc_autoscale(histogram, iters.shape[0], self.MIN_SIZE)
            self.offset = offset
            self.set_size(size)
            self._autoscale = False
            logger.debug("Autoscaled palette to offset %d, size %d", offset, size)

        colors = self.ramp()

        # The offset may be negative; the kernel needs it in [0, len(colors))
        offset = self.offset % colors.shape[0]

        if in_set_color is None:
            in_set_color = self.set_color
        set_color = np.array(in_set_color, dtype=np.uint8)

        if out is None:
            out = np.empty((iters.shape[0], 3), dtype=np.uint8)
        flat_out = out.reshape(-1, 3)
        if flat_out.shape[0] != iters.shape[0]:
            raise ValueError(
                f"Output buffer holds {flat_out.shape[0]} pixels, expected {iters.shape[0]}")

        apply_palette(iters, escape_threshold, colors, offset, set_color, flat_out)
        return flat_out
