"""
FractalGenerator Tests

Covers cached refinement, invalidation, the pixel -> complex mapping and
the histogram of iteration counts.
"""

import numpy as np
import pytest

import refract.generator as generator_module
from refract.functions import FractalFunction
from refract.generator import CacheState, FractalGenerator


def make_generator(func=FractalFunction.MANDELBROT, min_iters=5, inc_iters=3):
    """4x4 viewport at zoom 1 centered on the origin.

    Pixel (col, row) maps to c = (col - 2) + (2 - row)i.
    """
    generator = FractalGenerator(func, min_iters=min_iters, inc_iters=inc_iters)
    generator.initialize(4, 4)
    generator.set_coords(1.0, 0.0, 0.0)
    return generator


def test_first_and_second_pass_scenario():
    """First pass runs at min_iters, an unchanged view then refines by inc_iters"""
    generator = make_generator()

    generator.advance()
    assert generator.max_iters == 5
    assert generator.histogram().sum() == 16
    first = generator.iteration_buffer().copy()

    generator.advance()
    assert generator.max_iters == 8
    second = generator.iteration_buffer()
    assert np.all(second >= first)
    assert generator.histogram().sum() == 16


def test_escaping_pixel_stores_escaped_z():
    """c = 1 + i escapes after one step and keeps the escaped z"""
    generator = make_generator()
    generator.advance()

    zr, zi, count = generator.pixel_state(3, 1)
    assert count == 1
    assert count < generator.max_iters
    assert (zr, zi) == (1.0, 3.0)
    assert zr * zr + zi * zi >= 4


def test_pixel_outside_radius_does_not_iterate():
    """c = -2 + 2i starts outside |z| < 2"""
    generator = make_generator()
    generator.advance()
    assert generator.pixel_state(0, 0) == (-2.0, 2.0, 0)


def test_in_set_pixels_reach_threshold():
    """c = 0 and c = -1 never escape"""
    generator = make_generator()
    generator.advance()
    assert generator.pixel_state(2, 2)[2] == 5
    assert generator.pixel_state(1, 2)[2] == 5

    generator.advance()
    assert generator.pixel_state(2, 2)[2] == 8
    assert generator.histogram()[8] >= 2


def test_imaginary_axis_points_up():
    """Row 0 is the top of the view, with the largest imaginary part"""
    generator = make_generator(min_iters=1)
    generator.advance()
    # One step from z = c leaves z = c² + c; rows above and below the axis are conjugates
    top_zr, top_zi, _ = generator.pixel_state(2, 1)      # c = i
    bottom_zr, bottom_zi, _ = generator.pixel_state(2, 3)  # c = -i
    assert (top_zr, top_zi) == (-1.0, 1.0)
    assert (bottom_zr, bottom_zi) == (-1.0, -1.0)


def test_refinement_matches_fresh_computation():
    """Resuming from the cache gives the same counts as computing at the higher budget"""
    refined = make_generator()
    refined.advance()
    refined.advance()

    fresh = make_generator(min_iters=8)
    fresh.advance()

    assert fresh.max_iters == refined.max_iters == 8
    assert np.array_equal(fresh.iteration_buffer(), refined.iteration_buffer())


@pytest.mark.parametrize("mutate", [
    lambda g: g.set_zoom(1.0),
    lambda g: g.set_center(0.0, 0.0),
    lambda g: g.set_coords(1.0, 0.0, 0.0),
    lambda g: g.set_julia_constant(0.0, 0.0),
    lambda g: g.set_function(FractalFunction.MANDELBROT),
])
def test_setters_invalidate_cache(mutate):
    """Any parameter change sends the next pass back to min_iters from count 0"""
    generator = make_generator()
    generator.advance()
    generator.advance()
    assert generator.cache_state is CacheState.REFINING

    mutate(generator)
    assert generator.cache_state is CacheState.FRESH

    generator.advance()
    assert generator.max_iters == 5
    assert generator.pixel_state(2, 2)[2] == 5
    assert generator.histogram().sum() == 16


def test_initialize_discards_state():
    """Reallocating resets the arena and forces a fresh pass"""
    generator = make_generator()
    generator.advance()
    generator.advance()

    generator.initialize(3, 2)
    assert generator.cache_state is CacheState.FRESH
    assert generator.iteration_buffer().shape == (6,)
    assert not generator.iteration_buffer().any()

    generator.advance()
    assert generator.max_iters == 5
    assert generator.histogram().sum() == 6


@pytest.mark.parametrize("width, height", [(0, 4), (4, -1), (2.5, 4), (True, 4)])
def test_initialize_rejects_bad_dimensions(width, height):
    """Bad dimensions raise and leave the existing arena intact"""
    generator = make_generator()
    generator.advance()
    before = generator.iteration_buffer().copy()

    with pytest.raises(ValueError):
        generator.initialize(width, height)

    assert (generator.width, generator.height) == (4, 4)
    assert np.array_equal(generator.iteration_buffer(), before)


def test_advance_before_initialize():
    generator = FractalGenerator()
    with pytest.raises(RuntimeError):
        generator.advance()


def test_iteration_buffer_is_read_only():
    generator = make_generator()
    generator.advance()
    buffer = generator.iteration_buffer()
    with pytest.raises(ValueError):
        buffer[0] = 42


def test_histogram_length_tracks_threshold():
    generator = make_generator()
    for expected in (5, 8, 11):
        generator.advance()
        histogram = generator.histogram()
        assert len(histogram) == expected + 1
        assert histogram.sum() == 16


def test_julia_uses_constant_instead_of_pixel():
    """With constant 0 the Julia set is the unit disc; Mandelbrot escapes at c = 1"""
    julia = make_generator(FractalFunction.JULIA)
    julia.set_julia_constant(0.0, 0.0)
    julia.advance()

    mandel = make_generator(FractalFunction.MANDELBROT)
    mandel.advance()

    # Pixel (3, 2) is the point 1 + 0i
    assert julia.pixel_state(3, 2)[2] == julia.max_iters
    assert mandel.pixel_state(3, 2)[2] == 1
    # 1 + i squares to 2i, which sits on the escape radius
    assert julia.pixel_state(3, 1) == (0.0, 2.0, 1)


def test_higher_degrees():
    """z³ + c and z⁴ + c at c = 1 escape after one step"""
    for func in (FractalFunction.MANDELBROT_3, FractalFunction.MANDELBROT_4):
        generator = make_generator(func)
        generator.advance()
        assert generator.pixel_state(3, 2) == (2.0, 0.0, 1)
        assert generator.pixel_state(2, 2)[2] == generator.max_iters


def test_set_function_accepts_ids():
    generator = make_generator()
    generator.set_function(3)
    assert generator.function is FractalFunction.JULIA
    with pytest.raises(ValueError):
        generator.set_function(99)
    assert generator.function is FractalFunction.JULIA


def test_bad_parameters_rejected():
    generator = make_generator()
    with pytest.raises(ValueError):
        generator.set_zoom(0)
    with pytest.raises(ValueError):
        generator.set_coords(-1.0, 0.0, 0.0)
    with pytest.raises(ValueError):
        generator.set_iter_params(0, 10)
    with pytest.raises(ValueError):
        generator.set_iter_params(10, -1)
    assert generator.zoom == 1.0


def test_iter_params_apply_on_next_pass():
    generator = make_generator()
    generator.advance()
    generator.set_iter_params(7, 1)
    generator.advance()
    assert generator.max_iters == 6  # still refining, new increment

    generator.set_center(0.5, 0.0)
    generator.advance()
    assert generator.max_iters == 7  # fresh, new minimum


def test_setter_during_pass_forces_fresh_next_pass(monkeypatch):
    """A zoom change that lands mid-pass is not lost when the pass finishes,
    and the pass in flight keeps the zoom it started with"""

    generator = make_generator()
    generator.advance()

    real_refine_pass = generator_module.refine_pass
    calls = []

    def refine_then_zoom(*args):
        real_refine_pass(*args)
        if not calls:
            calls.append(args)
            generator.set_zoom(2.0)

    monkeypatch.setattr(generator_module, "refine_pass", refine_then_zoom)
    generator.advance()

    assert calls
    assert generator.max_iters == 8
    assert generator.zoom == 2.0
    assert generator.cache_state is CacheState.FRESH

    # The interrupted pass ran at the old zoom
    reference = make_generator()
    reference.advance()
    reference.advance()
    assert np.array_equal(generator.iteration_buffer(), reference.iteration_buffer())

    generator.advance()
    assert generator.max_iters == 5
    assert generator.cache_state is CacheState.REFINING

    zoomed = make_generator()
    zoomed.set_zoom(2.0)
    zoomed.advance()
    assert np.array_equal(generator.iteration_buffer(), zoomed.iteration_buffer())


@pytest.mark.parametrize("zoom", [0, -5, -0.5])
def test_constructor_rejects_bad_zoom(zoom):
    with pytest.raises(ValueError):
        FractalGenerator(zoom=zoom)


def test_constructor_zoom_default():
    assert FractalGenerator().zoom == FractalGenerator.DEFAULT_ZOOM
    assert FractalGenerator(zoom=50).zoom == 50.0


@pytest.mark.parametrize("col, row", [(-1, 0), (0, -1), (4, 0), (0, 4)])
def test_pixel_state_out_of_bounds(col, row):
    generator = make_generator()
    generator.advance()
    with pytest.raises(IndexError):
        generator.pixel_state(col, row)
