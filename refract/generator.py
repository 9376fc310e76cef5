"""
Incremental Mandelbrot/Julia generator with cached refinement.

The FractalGenerator keeps the z value and iteration count of every pixel
between frames. While the viewport stays put, each call to advance() raises
the escape threshold and resumes every pixel where it stopped, so detail
accumulates without recomputing from zero. Any change to zoom, center,
function or Julia constant sends the generator back to a fresh pass at the
minimum threshold.

Usage:
    generator = FractalGenerator()
    generator.initialize(640, 480)
    generator.set_coords(200.0, -0.5, 0.0)

    # In your render loop:
    generator.advance()
    counts = generator.iteration_buffer()
"""

import logging
import threading
from enum import Enum

import numpy as np

from .compute import refine_pass, calc_histogram
from .functions import FractalFunction

logger = logging.getLogger(__name__)


def _check_zoom(zoom):
    zoom = float(zoom)
    if not zoom > 0:
        raise ValueError(f"Zoom must be positive, got {zoom}")
    return zoom


class CacheState(Enum):
    """Whether the next pass may reuse per-pixel state."""

    FRESH = "fresh"          # Recompute every pixel from count 0
    REFINING = "refining"    # Resume every pixel from its cached (z, count)


class FractalGenerator:
    """
    Owns the per-pixel iteration arena for one viewport.

    Attributes:
        width, height: Arena dimensions in pixels (0 until initialize())
        max_iters: Escape threshold used by the last pass
    """

    DEFAULT_MIN_ITERS = 25  # Threshold after every invalidation
    DEFAULT_INC_ITERS = 10  # Threshold increase per refinement
    DEFAULT_ZOOM = 200.0

    def __init__(self, func=FractalFunction.MANDELBROT, min_iters=None, inc_iters=None,
                 zoom=None):
        self._lock = threading.Lock()

        self._func = FractalFunction.coerce(func)
        self._zoom = _check_zoom(self.DEFAULT_ZOOM if zoom is None else zoom)
        self._re = 0.0
        self._im = 0.0
        self._julia_re = 0.0
        self._julia_im = 0.0

        self._min_iters = self.DEFAULT_MIN_ITERS
        self._inc_iters = self.DEFAULT_INC_ITERS
        self.set_iter_params(
            self.DEFAULT_MIN_ITERS if min_iters is None else min_iters,
            self.DEFAULT_INC_ITERS if inc_iters is None else inc_iters,
        )
        self.max_iters = self._min_iters

        self.width = 0
        self.height = 0
        self._cache_zr = None
        self._cache_zi = None
        self._iters = None
        self._state = CacheState.FRESH

    def initialize(self, width, height):
        """
        (Re)allocate the arena for a width x height viewport.

        All previous per-pixel state is discarded and the next pass starts
        fresh. Invalid dimensions raise ValueError and leave the current
        arena untouched.
        """
        for name, value in (("width", width), ("height", height)):
            if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
                raise ValueError(f"{name} must be an integer, got {value!r}")
            if value <= 0:
                raise ValueError(f"{name} must be positive, got {value}")

        size = int(width) * int(height)
        cache_zr = np.zeros(size, dtype=np.float64)
        cache_zi = np.zeros(size, dtype=np.float64)
        iters = np.zeros(size, dtype=np.int64)

        with self._lock:
            self.width = int(width)
            self.height = int(height)
            self._cache_zr = cache_zr
            self._cache_zi = cache_zi
            self._iters = iters
            self._state = CacheState.FRESH
        logger.debug("Allocated %dx%d iteration arena", width, height)

    def _invalidate(self):
        # Caller holds the lock
        self._state = CacheState.FRESH

    def set_function(self, func):
        """Select the iterated function (FractalFunction or its id)."""
        func = FractalFunction.coerce(func)
        with self._lock:
            self._func = func
            self._invalidate()

    def set_zoom(self, zoom):
        """Set pixels per unit of the complex plane."""
        zoom = _check_zoom(zoom)
        with self._lock:
            self._zoom = zoom
            self._invalidate()

    def set_center(self, re, im):
        """Set the complex coordinate shown at the center pixel."""
        with self._lock:
            self._re = float(re)
            self._im = float(im)
            self._invalidate()

    def set_coords(self, zoom, re, im):
        """Set zoom and center in one step."""
        zoom = _check_zoom(zoom)
        with self._lock:
            self._zoom = zoom
            self._re = float(re)
            self._im = float(im)
            self._invalidate()

    def set_julia_constant(self, re, im):
        """Set the additive constant used by the Julia variants."""
        with self._lock:
            self._julia_re = float(re)
            self._julia_im = float(im)
            self._invalidate()

    def set_iter_params(self, min_iters, inc_iters):
        """
        Set the iteration parameters that trade speed for detail.

        Args:
            min_iters: Threshold for the first pass after an invalidation (>= 1)
            inc_iters: Threshold increase per refinement pass (>= 0)
        """
        if int(min_iters) < 1:
            raise ValueError(f"min_iters must be at least 1, got {min_iters}")
        if int(inc_iters) < 0:
            raise ValueError(f"inc_iters must not be negative, got {inc_iters}")
        with self._lock:
            self._min_iters = int(min_iters)
            self._inc_iters = int(inc_iters)

    def advance(self):
        """
        Perform one refinement pass over every pixel.

        Parameters are captured atomically at the start so that setters
        called from another thread apply to the next pass rather than
        tearing this one.
        """
        with self._lock:
            if self._iters is None:
                raise RuntimeError("advance() called before initialize()")

            width, height = self.width, self.height
            cache_zr, cache_zi, iters = self._cache_zr, self._cache_zi, self._iters
            zoom, re, im = self._zoom, self._re, self._im
            julia_re, julia_im = self._julia_re, self._julia_im
            func = self._func

            if self._state is CacheState.REFINING:
                # Unchanged view: raise the budget and resume every pixel
                use_cache = True
                max_iters = self.max_iters + self._inc_iters
            else:
                # Moved: drop back to the minimum budget and start over
                use_cache = False
                max_iters = self._min_iters
                self._state = CacheState.REFINING
            self.max_iters = max_iters

        refine_pass(cache_zr, cache_zi, iters, width, height, zoom, re, im,
                    julia_re, julia_im, func.is_julia, func.degree, use_cache, max_iters)

    update = advance

    def iteration_buffer(self):
        """Read-only row-major view of the per-pixel iteration counts."""
        if self._iters is None:
            return np.zeros(0, dtype=np.int64)
        view = self._iters.view()
        view.flags.writeable = False
        return view

    def histogram(self):
        """Pixel counts per iteration value, length max_iters + 1."""
        if self._iters is None:
            return np.zeros(self.max_iters + 1, dtype=np.int64)
        return calc_histogram(self._iters, self.max_iters)

    def pixel_state(self, col, row):
        """Return the cached (zr, zi, count) of one pixel."""
        if not (0 <= col < self.width and 0 <= row < self.height):
            raise IndexError(f"Pixel ({col}, {row}) outside {self.width}x{self.height} arena")
        index = row * self.width + col
        return (float(self._cache_zr[index]), float(self._cache_zi[index]),
                int(self._iters[index]))

    @property
    def cache_state(self):
        return self._state

    @property
    def function(self):
        return self._func

    @property
    def zoom(self):
        return self._zoom

    @property
    def center(self):
        return self._re, self._im

    @property
    def julia_constant(self):
        return self._julia_re, self._julia_im

    @property
    def min_iters(self):
        return self._min_iters

    @property
    def inc_iters(self):
        return self._inc_iters
