"""
Iteration function variants for the fractal generator.

Each variant is a member of the FractalFunction enum. The integer value of
a member is its function id (the same id the JIT kernels in compute.py
dispatch on), and each member knows its polynomial degree, whether it is a
Julia variant, and how to apply one iteration step.

Supported variants:
- MANDELBROT:   z² + c, c = pixel coordinate
- MANDELBROT_3: z³ + c, c = pixel coordinate
- MANDELBROT_4: z⁴ + c, c = pixel coordinate
- JULIA:        z² + k, k = fixed Julia constant
- JULIA_3:      z³ + k
- JULIA_4:      z⁴ + k
"""

from enum import IntEnum

from numba import jit


@jit(nopython=True, cache=True)
def step_z2(zr, zi, cr, ci):
    """One iteration of z² + c."""
    return zr * zr - zi * zi + cr, 2 * zr * zi + ci


@jit(nopython=True, cache=True)
def step_z3(zr, zi, cr, ci):
    """One iteration of z³ + c."""
    zr2 = zr * zr
    zi2 = zi * zi
    return zr * (zr2 - 3 * zi2) + cr, zi * (3 * zr2 - zi2) + ci


@jit(nopython=True, cache=True)
def step_z4(zr, zi, cr, ci):
    """One iteration of z⁴ + c."""
    zr2 = zr * zr
    zi2 = zi * zi
    return zr2 * zr2 - 6 * zr2 * zi2 + zi2 * zi2 + cr, 4 * zr * zi * (zr2 - zi2) + ci


_STEPS = {2: step_z2, 3: step_z3, 4: step_z4}


class FractalFunction(IntEnum):
    """Degree x (Mandelbrot | Julia) variant of the iterated function."""

    MANDELBROT = 0
    MANDELBROT_3 = 1
    MANDELBROT_4 = 2
    JULIA = 3
    JULIA_3 = 4
    JULIA_4 = 5

    @property
    def degree(self):
        return 2 + self.value % 3

    @property
    def is_julia(self):
        return self.value >= FractalFunction.JULIA

    @property
    def label(self):
        kind = "Julia" if self.is_julia else "Mandelbrot"
        return f"{kind} z^{self.degree} + c"

    def step(self, zr, zi, cr, ci):
        """Apply one iteration step of this variant, returning (zr', zi')."""
        return _STEPS[self.degree](zr, zi, cr, ci)

    def with_degree(self, degree):
        """Same family (Mandelbrot or Julia) with a different degree."""
        if degree not in _STEPS:
            raise ValueError(f"Unsupported degree: {degree}")
        base = FractalFunction.JULIA if self.is_julia else FractalFunction.MANDELBROT
        return FractalFunction(base + degree - 2)

    @classmethod
    def coerce(cls, func):
        """Accept a FractalFunction or its integer id; reject anything else."""
        if isinstance(func, cls):
            return func
        if isinstance(func, bool) or not isinstance(func, int):
            raise ValueError(f"Undefined fractal function: {func!r}")
        try:
            return cls(func)
        except ValueError:
            raise ValueError(f"Undefined fractal function: {func!r}") from None
