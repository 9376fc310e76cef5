"""
Escape-time and coloring kernels using Numba JIT compilation.

This module contains the performance-critical loops of the generator and
the palette mapper:
- Refinement passes that resume every pixel from its cached (z, count)
- Iteration histograms
- Palette lookup from iteration counts to RGB

Frames are computed serially, one pixel after another, so none of these
kernels use prange.
"""

import numpy as np
from numba import jit

from .functions import step_z2, step_z3, step_z4


ESCAPE_RADIUS_SQ = 4.0  # |z|² bound for escape


@jit(nopython=True, cache=True)
def iterate_function(zr, zi, cr, ci, degree):
    """
    Apply one iteration of z^degree + c.

    Args:
        zr, zi: Real and imaginary parts of z
        cr, ci: Real and imaginary parts of the additive constant
        degree: 2, 3 or 4

    Returns:
        (new_zr, new_zi): The next z value
    """
    if degree == 3:
        return step_z3(zr, zi, cr, ci)
    elif degree == 4:
        return step_z4(zr, zi, cr, ci)
    return step_z2(zr, zi, cr, ci)


@jit(nopython=True, cache=True)
def refine_pass(cache_zr, cache_zi, iters, width, height, zoom, re, im,
                jr, ji, julia, degree, use_cache, max_iters):
    """
    Advance every pixel of a width x height grid to the given iteration budget.

    The arrays are flat and indexed row * width + col. When use_cache is
    true each pixel resumes from the (z, count) stored by the previous pass,
    otherwise it restarts from its pixel coordinate with a count of 0.

    Args:
        cache_zr, cache_zi: Per-pixel z values (modified in place)
        iters: Per-pixel iteration counts (modified in place)
        width, height: Grid dimensions in pixels
        zoom: Pixels per unit of the complex plane
        re, im: Complex coordinate at the center pixel
        jr, ji: Julia constant (ignored unless julia is true)
        julia: Use the Julia constant as c instead of the pixel coordinate
        degree: Polynomial degree of the iterated function
        use_cache: Resume from cached values instead of starting fresh
        max_iters: Iteration budget for this pass
    """
    half_w = width // 2
    half_h = height // 2

    index = 0
    for y in range(height):
        # Screen rows grow downward, the imaginary axis grows upward
        ci0 = (half_h - y) / zoom + im
        for x in range(width):
            cr = (x - half_w) / zoom + re
            ci = ci0

            if use_cache:
                zr = cache_zr[index]
                zi = cache_zi[index]
                niters = iters[index]
            else:
                zr = cr
                zi = ci
                niters = 0

            if julia:
                cr = jr
                ci = ji

            while zr * zr + zi * zi < ESCAPE_RADIUS_SQ and niters < max_iters:
                zr, zi = iterate_function(zr, zi, cr, ci, degree)
                niters += 1

            cache_zr[index] = zr
            cache_zi[index] = zi
            iters[index] = niters
            index += 1


@jit(nopython=True, cache=True)
def calc_histogram(iters, max_iters):
    """
    Count pixels per iteration value.

    Returns:
        int64 array of length max_iters + 1 where entry i is the number of
        pixels whose count equals i.
    """
    histo = np.zeros(max_iters + 1, dtype=np.int64)
    for i in range(iters.shape[0]):
        histo[min(iters[i], max_iters)] += 1
    return histo


@jit(nopython=True, cache=True)
def apply_palette(iters, max_iters, colors, offset, set_color, out):
    """
    Map iteration counts to ramp colors.

    Args:
        iters: Flat array of iteration counts
        max_iters: Escape threshold; pixels with this count get set_color
        colors: Nx3 ramp of RGB colors (uint8)
        offset: Cyclic ramp offset, already normalized to [0, N)
        set_color: RGB color for pixels inside the set
        out: Flat Nx3 output array (modified in place)
    """
    num_colors = colors.shape[0]
    for i in range(iters.shape[0]):
        n = iters[i]
        if n == max_iters:
            out[i, 0] = set_color[0]
            out[i, 1] = set_color[1]
            out[i, 2] = set_color[2]
        else:
            idx = (n + offset) % num_colors
            out[i, 0] = colors[idx, 0]
            out[i, 1] = colors[idx, 1]
            out[i, 2] = colors[idx, 2]


def warmup_jit():
    """
    Warm up JIT compilation with small dummy arrays.

    Call this once at startup to pre-compile the Numba functions,
    avoiding a delay on the first real frame.
    """
    zr = np.zeros(4, dtype=np.float64)
    zi = np.zeros(4, dtype=np.float64)
    iters = np.zeros(4, dtype=np.int64)
    for degree in (2, 3, 4):
        refine_pass(zr, zi, iters, 2, 2, 1.0, 0.0, 0.0, 0.0, 0.0, False, degree, False, 4)
    calc_histogram(iters, 4)
    colors = np.zeros((8, 3), dtype=np.uint8)
    out = np.zeros((4, 3), dtype=np.uint8)
    apply_palette(iters, 4, colors, 0, np.zeros(3, dtype=np.uint8), out)
