"""
Cyclic control-point palettes.

A Palette is an ordered list of (position, (r, g, b)) control points with
positions in [0, 1]. The palette is cyclic: the last control point blends
back into the first, so a palette whose points do not cover 0 and 1 still
wraps smoothly. create_interpolation(n) materializes an n-entry color ramp.

To add a new preset:
1. Define its control points as a tuple of (position, (r, g, b)) pairs
2. Add it to the PALETTES dictionary at the bottom of this file
"""

import numpy as np


def _check_color(color):
    if len(color) != 3:
        raise ValueError(f"Color must have 3 channels, got {color!r}")
    channels = tuple(int(c) for c in color)
    if any(c < 0 or c > 255 for c in channels):
        raise ValueError(f"Color channels must be in 0..255, got {color!r}")
    return channels


class Palette:
    """
    Ordered, cyclic list of color control points.

    Usage:
        palette = Palette([(0.0, (0, 0, 0)), (1.0, (255, 255, 255))])
        ramp = palette.create_interpolation(64)  # (64, 3) uint8
    """

    def __init__(self, points):
        points = [(float(pos), _check_color(color)) for pos, color in points]
        if not points:
            raise ValueError("A palette needs at least one control point")
        for pos, _ in points:
            if not 0.0 <= pos <= 1.0:
                raise ValueError(f"Control point position must be in [0, 1], got {pos}")
        self.points = sorted(points, key=lambda p: p[0])

    def __len__(self):
        return len(self.points)

    def __eq__(self, other):
        if not isinstance(other, Palette):
            return NotImplemented
        return self.points == other.points

    def __repr__(self):
        return f"Palette({self.points!r})"

    def copy(self):
        return Palette(self.points)

    def invert(self):
        """Replace every control color with its photographic negative."""
        self.points = [(pos, tuple(255 - c for c in color)) for pos, color in self.points]

    def reverse(self):
        """Mirror the control points so the ramp runs the other way."""
        self.points = [(1.0 - pos, color) for pos, color in reversed(self.points)]

    def create_interpolation(self, size):
        """
        Build a ramp of `size` colors evenly spaced over [0, 1].

        Entry i sits at position i / (size - 1); colors between control
        points are blended linearly, wrapping from the last point to the
        first.

        Returns:
            (size, 3) uint8 array
        """
        size = int(size)
        if size < 1:
            raise ValueError(f"Ramp size must be positive, got {size}")

        positions = [pos for pos, _ in self.points]
        colors = np.array([color for _, color in self.points], dtype=np.float64)

        # Wrap the end points around for the cyclic blend where the ends are open
        xp = list(positions)
        fp = [colors]
        if positions[0] > 0.0:
            xp.insert(0, positions[-1] - 1.0)
            fp.insert(0, colors[-1:])
        if positions[-1] < 1.0:
            xp.append(positions[0] + 1.0)
            fp.append(colors[:1])
        xp = np.array(xp)
        fp = np.vstack(fp)

        ts = np.linspace(0.0, 1.0, size) if size > 1 else np.zeros(1)
        ramp = np.empty((size, 3), dtype=np.uint8)
        for channel in range(3):
            ramp[:, channel] = np.rint(np.interp(ts, xp, fp[:, channel]))
        return ramp


# Preset control points
SUNSET = (
    (0.0, (32, 0, 64)),
    (0.25, (160, 0, 96)),
    (0.5, (255, 96, 0)),
    (0.75, (255, 224, 64)),
    (1.0, (255, 255, 224)),
)

HUBBLE = (
    (0.0, (0, 0, 32)),
    (0.3, (40, 80, 160)),
    (0.55, (200, 160, 80)),
    (0.8, (255, 240, 200)),
    (1.0, (120, 40, 20)),
)

RAINBOW = (
    (0.0, (255, 0, 0)),
    (1 / 6, (255, 255, 0)),
    (2 / 6, (0, 255, 0)),
    (3 / 6, (0, 255, 255)),
    (4 / 6, (0, 0, 255)),
    (5 / 6, (255, 0, 255)),
)

CHROME = (
    (0.0, (20, 20, 30)),
    (0.4, (200, 210, 220)),
    (0.5, (255, 255, 255)),
    (0.6, (120, 130, 150)),
    (1.0, (40, 40, 60)),
)

EVENING = (
    (0.0, (10, 10, 40)),
    (0.35, (90, 40, 120)),
    (0.65, (230, 110, 90)),
    (1.0, (250, 200, 120)),
)

ELECTRIC = (
    (0.0, (0, 0, 0)),
    (0.2, (0, 60, 255)),
    (0.45, (0, 255, 255)),
    (0.5, (255, 255, 255)),
    (0.75, (180, 0, 255)),
)

# Gradients after the classic fire/ocean/forest colormaps
HOT = (
    (0.0, (0, 0, 0)),
    (0.4, (255, 0, 0)),
    (0.7, (255, 190, 0)),
    (1.0, (255, 255, 255)),
)

OCEAN = (
    (0.0, (0, 0, 50)),
    (0.5, (0, 128, 178)),
    (1.0, (255, 255, 255)),
)

FOREST = (
    (0.0, (0, 80, 0)),
    (0.3, (0, 132, 0)),
    (0.7, (140, 203, 0)),
    (1.0, (255, 255, 255)),
)

GRAYSCALE = (
    (0.0, (0, 0, 0)),
    (1.0, (255, 255, 255)),
)


# Registry of all available palettes.
# Keys are display names, values are control point tuples.
PALETTES = {
    'Sunset': SUNSET,
    'Hubble': HUBBLE,
    'Rainbow': RAINBOW,
    'Chrome': CHROME,
    'Evening': EVENING,
    'Electric': ELECTRIC,
    'Hot': HOT,
    'Ocean': OCEAN,
    'Forest': FOREST,
    'Grayscale': GRAYSCALE,
}


def get_palette(name):
    """
    Get a new Palette instance for a preset name.

    Raises:
        ValueError if name is not a known preset
    """
    try:
        return Palette(PALETTES[name])
    except KeyError:
        raise ValueError(f"Unknown palette: {name!r}") from None


def list_palette_names():
    """Get list of available palette names."""
    return list(PALETTES.keys())
