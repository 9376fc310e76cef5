"""
Pygame viewer for the fractal generator.

Contains the RefractApp class which handles:
- Window setup and main loop
- User input (zoom, pan, palette controls, keyboard)
- Blitting the views' display buffers
- Wiring the Mandelbrot view's center to the Julia view's constant

The fractal work itself happens on the RenderLoop thread; this module only
translates events into calls on the views it owns.
"""

import logging
import os
from datetime import datetime

import pygame

from .compute import warmup_jit
from .functions import FractalFunction
from .palette import list_palette_names
from .render_loop import RenderLoop
from .settings import load_settings
from .view import FractalView

logger = logging.getLogger(__name__)


HELP_TEXT = (
    "Pan: mouse drag or arrow keys | Zoom: mouse wheel or -/= | "
    "Palette shift: Z/X | Palette scale: C/V | Invert: I | Reverse: R | "
    "Autoscale: A | Presets: 1-9 | Examples: F1-F5 | Degree: F6-F8 | "
    "Pause: P | Save: S | Coords: K"
)


class RefractApp:
    """
    Main application class: a Mandelbrot view and a Julia view side by side.

    The view that receives keyboard input is the last one clicked.
    """

    def __init__(self, settings=None):
        self.settings = settings or load_settings()
        self.width = self.settings['window_width']
        self.height = self.settings['window_height']

        self.mandel_view = FractalView.from_settings(
            self.settings, FractalFunction.MANDELBROT, self.settings['mandelbrot_palette'])
        self.julia_view = FractalView.from_settings(
            self.settings, FractalFunction.JULIA, self.settings['julia_palette'])
        self.views = [self.mandel_view, self.julia_view]
        self.selected = self.mandel_view

        # The Julia constant follows the Mandelbrot center
        self.mandel_view.add_coords_listener(self._mandel_coords_changed)
        self.set_coords(self.settings['default_zoom'], -0.5, 0.0)
        self._layout_views()

        self.render_loop = RenderLoop(self.views)
        self.palette_names = list_palette_names()

        self.screen = None
        self.clock = None
        self.running = False

    def _layout_views(self):
        half = max(self.width // 2, 1)
        for view in self.views:
            view.resize(half, max(self.height, 1))

    def _view_origin(self, view):
        return (0, 0) if view is self.mandel_view else (self.width // 2, 0)

    def _view_at(self, pos):
        return self.mandel_view if pos[0] < self.width // 2 else self.julia_view

    def _mandel_coords_changed(self, view):
        zoom, re, im = view.coords
        self.julia_view.generator.set_julia_constant(re, im)

    def set_coords(self, zoom, re, im):
        """Move the Mandelbrot view and reset the Julia view to its default."""
        self.mandel_view.set_coords(zoom, re, im)
        self.julia_view.set_coords(self.settings['default_zoom'], 0.0, 0.0)

    def run(self):
        """Run the application main loop."""
        self._init_pygame()
        pygame.display.set_caption("Compiling (first run only)...")
        warmup_jit()
        self.render_loop.start()

        self.running = True
        while self.running:
            for event in pygame.event.get():
                self._handle_event(event)
            self._check_render_error()
            self._draw()
            self.clock.tick(60)

        self.render_loop.stop(timeout=5)
        pygame.quit()

    def _init_pygame(self):
        pygame.init()
        self.screen = pygame.display.set_mode((self.width, self.height), pygame.RESIZABLE)
        self.clock = pygame.time.Clock()

    def _check_render_error(self):
        if self.render_loop.error is not None:
            self.running = False

    def _handle_event(self, event):
        if event.type == pygame.QUIT:
            self.running = False
        elif event.type == pygame.VIDEORESIZE:
            self.width, self.height = event.w, event.h
            self.screen = pygame.display.set_mode((self.width, self.height), pygame.RESIZABLE)
            self._layout_views()
        elif event.type == pygame.MOUSEWHEEL:
            self._view_at(pygame.mouse.get_pos()).wheel(-event.y)
        elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            self.selected = self._view_at(event.pos)
            x0, y0 = self._view_origin(self.selected)
            self.selected.begin_drag(event.pos[0] - x0, event.pos[1] - y0)
        elif event.type == pygame.MOUSEBUTTONUP and event.button == 1:
            self.selected.end_drag()
        elif event.type == pygame.MOUSEMOTION and self.selected.dragging:
            x0, y0 = self._view_origin(self.selected)
            self.selected.drag_to(event.pos[0] - x0, event.pos[1] - y0)
        elif event.type == pygame.KEYDOWN:
            self._handle_key(event)

    def _handle_key(self, event):
        view = self.selected
        key = event.key

        if key == pygame.K_ESCAPE:
            self.running = False
        elif key == pygame.K_MINUS:
            view.zoom_out()
        elif key == pygame.K_EQUALS:
            view.zoom_in()
        elif key == pygame.K_LEFT:
            view.pan(-view.PAN_PIXELS, 0)
        elif key == pygame.K_RIGHT:
            view.pan(view.PAN_PIXELS, 0)
        elif key == pygame.K_UP:
            view.pan(0, view.PAN_PIXELS)
        elif key == pygame.K_DOWN:
            view.pan(0, -view.PAN_PIXELS)
        elif key == pygame.K_z:
            view.mapper.shift(-1)
        elif key == pygame.K_x:
            view.mapper.shift(1)
        elif key == pygame.K_c:
            view.mapper.scale(-1)
        elif key == pygame.K_v:
            view.mapper.scale(1)
        elif key == pygame.K_i:
            view.mapper.invert()
        elif key == pygame.K_r:
            view.mapper.reverse()
        elif key == pygame.K_a:
            view.mapper.request_autoscale()
        elif key == pygame.K_p:
            self.render_loop.toggle_pause()
        elif key == pygame.K_s:
            self._save_image(view)
        elif key == pygame.K_k:
            logger.info("Coordinates:\n%s", view.coords_text())
        elif key == pygame.K_h:
            logger.info(HELP_TEXT)
        elif pygame.K_1 <= key <= pygame.K_9:
            index = key - pygame.K_1
            if index < len(self.palette_names):
                view.mapper.set_palette(self.palette_names[index])
        elif pygame.K_F1 <= key <= pygame.K_F5:
            self._goto_example(key - pygame.K_F1)
        elif pygame.K_F6 <= key <= pygame.K_F8:
            view.set_degree(2 + key - pygame.K_F6)

    def _goto_example(self, index):
        examples = self.settings['examples']
        if index >= len(examples):
            return
        example = examples[index]
        self.mandel_view.set_function(FractalFunction.MANDELBROT)
        self.julia_view.set_function(FractalFunction.JULIA)
        self.set_coords(example['zoom'], example['re'], example['im'])
        logger.info("Jumped to example: %s", example.get('name', index + 1))

    def _save_image(self, view):
        """Save the selected view's last frame as a PNG in the working directory."""
        kind = "julia" if view is self.julia_view else "mandelbrot"
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filename = os.path.abspath(f"{kind}_{timestamp}.png")

        surface = pygame.surfarray.make_surface(view.buffer.swapaxes(0, 1))
        pygame.image.save(surface, filename)
        logger.info("Saved %s", filename)

    def _draw(self):
        self.screen.fill((0, 0, 0))
        for view in self.views:
            buffer = view.buffer
            if buffer.size == 0:
                continue
            surface = pygame.surfarray.make_surface(buffer.swapaxes(0, 1))
            self.screen.blit(surface, self._view_origin(view))

        paused = " (paused)" if self.render_loop.paused else ""
        pygame.display.set_caption(
            f"Refract - {self.selected.generator.function.label} - "
            f"{self.selected.status_text()}{paused}")
        pygame.display.flip()


def run(settings_path=None):
    """
    Run the fractal viewer.

    Args:
        settings_path: Optional settings.json to use instead of the packaged one
    """
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s: %(message)s")
    app = RefractApp(load_settings(settings_path))
    try:
        app.run()
    except KeyboardInterrupt:
        app.render_loop.stop(timeout=5)
        pygame.quit()
