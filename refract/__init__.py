"""
Refract: incremental Mandelbrot and Julia set explorer.

The core is an escape-time generator that keeps per-pixel state between
frames and refines it while the view stays put, plus a palette mapper that
turns iteration counts into colors with manual or histogram-driven scaling.
Numba compiles the per-pixel loops; a small Pygame viewer drives them.

Quick Start:
    from refract import FractalGenerator, PaletteMapper

    generator = FractalGenerator()
    generator.initialize(320, 240)
    generator.advance()
    rgb = PaletteMapper('Sunset').map_frame(
        generator.iteration_buffer(), generator.max_iters)

Or from command line:
    python -m refract

Package Structure:
    - functions.py: Fractal function variants (degree x Mandelbrot/Julia)
    - compute.py: JIT-compiled refinement, histogram and coloring kernels
    - generator.py: Cached, incremental iteration engine
    - palette.py: Cyclic control-point palettes and presets
    - mapper.py: Iteration-count to color mapping and autoscale
    - view.py: Generator + mapper + display buffer with navigation
    - render_loop.py: Background render thread with pause/resume
    - settings.py: settings.json loading
    - app.py: Pygame viewer
"""

from .functions import FractalFunction
from .generator import FractalGenerator, CacheState
from .palette import Palette, PALETTES, get_palette, list_palette_names
from .mapper import PaletteMapper, calc_autoscale
from .view import FractalView
from .render_loop import RenderLoop
from .settings import load_settings

__version__ = "1.0.0"
__all__ = [
    "FractalFunction",
    "FractalGenerator",
    "CacheState",
    "Palette",
    "PALETTES",
    "get_palette",
    "list_palette_names",
    "PaletteMapper",
    "calc_autoscale",
    "FractalView",
    "RenderLoop",
    "load_settings",
]
