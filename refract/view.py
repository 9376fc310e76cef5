"""
One on-screen fractal view: a generator, a palette mapper and a display buffer.

FractalView is what a UI drives. It turns navigation gestures (pan, zoom,
drag) into generator coordinates, forwards palette controls to the mapper,
and renders frames into an RGB buffer that the UI blits. Resizes are
recorded by the UI thread and applied by the render thread on its next
frame, so the iteration arena is only ever reallocated between passes.
"""

import logging
import time

import numpy as np

from .functions import FractalFunction
from .generator import FractalGenerator
from .mapper import PaletteMapper

logger = logging.getLogger(__name__)


class FractalView:
    """
    Couples a FractalGenerator with a PaletteMapper for display.

    Attributes:
        generator: The iteration engine for this view
        mapper: The palette mapper for this view
        buffer: (height, width, 3) uint8 RGB image of the last frame
        frame_millis: Time taken by the last frame in milliseconds
    """

    ZOOM_KEY_FACTOR = 1.02    # -/= keys
    ZOOM_WHEEL_FACTOR = 1.1   # Mouse wheel
    PAN_PIXELS = 10           # Arrow keys
    CROSSHAIR_SIZE = 40
    CROSSHAIR_COLOR = (255, 255, 255)

    def __init__(self, func=FractalFunction.MANDELBROT, palette='Sunset', width=1, height=1,
                 min_iters=None, inc_iters=None, palette_size=None, zoom=None):
        self.generator = FractalGenerator(func, min_iters, inc_iters, zoom)
        self.mapper = PaletteMapper(palette, palette_size)

        self.width = 0
        self.height = 0
        self.buffer = np.zeros((0, 0, 3), dtype=np.uint8)
        self._pending_size = (width, height)

        self.frame_millis = 0
        self._last_frame_time = None

        self._dragging = False
        self._drag_origin = None

        self._listeners = []

    @classmethod
    def from_settings(cls, settings, func, palette):
        return cls(func, palette,
                   min_iters=settings['min_iters'],
                   inc_iters=settings['inc_iters'],
                   palette_size=settings['palette_size'],
                   zoom=settings['default_zoom'])

    # Sizing -----------------------------------------------------------------

    def resize(self, width, height):
        """Record a new size; applied by the next initialize()."""
        if width <= 0 or height <= 0:
            raise ValueError(f"View size must be positive, got {width}x{height}")
        self._pending_size = (int(width), int(height))

    def has_resized(self):
        return self._pending_size is not None

    def initialize(self):
        """Reallocate the arena and display buffer at the pending size."""
        if self._pending_size is None:
            return
        width, height = self._pending_size
        self.generator.initialize(width, height)
        self.buffer = np.zeros((height, width, 3), dtype=np.uint8)
        self.width, self.height = width, height
        self._pending_size = None

    # Rendering --------------------------------------------------------------

    def render(self):
        """Advance the generator one pass and recolor the display buffer."""
        if self._last_frame_time is None:
            self._last_frame_time = time.monotonic()

        self.generator.advance()
        self.mapper.map_frame(self.generator.iteration_buffer(), self.generator.max_iters,
                              out=self.buffer)

        if self._dragging:
            self._draw_crosshair()

        now = time.monotonic()
        self.frame_millis = int((now - self._last_frame_time) * 1000)
        self._last_frame_time = now

    def _draw_crosshair(self):
        half_w = self.width // 2
        half_h = self.height // 2
        half_c = self.CROSSHAIR_SIZE // 2
        rows = slice(max(half_h - half_c, 0), min(half_h + half_c, self.height), 2)
        cols = slice(max(half_w - half_c, 0), min(half_w + half_c, self.width), 2)
        self.buffer[rows, half_w] = self.CROSSHAIR_COLOR
        self.buffer[half_h, cols] = self.CROSSHAIR_COLOR

    def status_text(self):
        return f"{self.generator.max_iters} iters in {self.frame_millis}ms"

    # Coordinates ------------------------------------------------------------

    def add_coords_listener(self, listener):
        """Register listener(view), called whenever zoom or center change."""
        self._listeners.append(listener)

    def set_coords(self, zoom, re, im):
        self.generator.set_coords(zoom, re, im)
        for listener in self._listeners:
            listener(self)

    @property
    def coords(self):
        re, im = self.generator.center
        return self.generator.zoom, re, im

    def coords_text(self):
        """Zoom and center as newline-separated text for the clipboard."""
        zoom, re, im = self.coords
        return f"{zoom!r}\n{re!r}\n{im!r}"

    def zoom_in(self, factor=ZOOM_KEY_FACTOR):
        zoom, re, im = self.coords
        self.set_coords(zoom * factor, re, im)

    def zoom_out(self, factor=ZOOM_KEY_FACTOR):
        zoom, re, im = self.coords
        self.set_coords(zoom / factor, re, im)

    def wheel(self, units):
        """Zoom out for positive scroll units, in for negative ones."""
        if units > 0:
            self.zoom_out(self.ZOOM_WHEEL_FACTOR)
        elif units < 0:
            self.zoom_in(self.ZOOM_WHEEL_FACTOR)

    def pan(self, dx, dy):
        """Move the view by dx, dy pixels (right and up are positive)."""
        zoom, re, im = self.coords
        self.set_coords(zoom, re + dx / zoom, im + dy / zoom)

    def begin_drag(self, x, y):
        zoom, re, im = self.coords
        self._dragging = True
        self._drag_origin = (x, y, re, im)

    def drag_to(self, x, y):
        if not self._dragging:
            return
        start_x, start_y, start_re, start_im = self._drag_origin
        zoom = self.generator.zoom
        self.set_coords(zoom, start_re + (start_x - x) / zoom, start_im - (start_y - y) / zoom)

    def end_drag(self):
        self._dragging = False
        self._drag_origin = None

    @property
    def dragging(self):
        return self._dragging

    # Function ---------------------------------------------------------------

    def set_function(self, func):
        self.generator.set_function(func)

    def set_degree(self, degree):
        self.generator.set_function(self.generator.function.with_degree(degree))
