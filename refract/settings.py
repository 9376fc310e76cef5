"""
Settings for the fractal viewer, loaded from settings.json.

The JSON file shipped next to this module holds the defaults for the
iteration parameters, palettes, window size and the list of example
locations. Keys missing from the file fall back to DEFAULT_SETTINGS.
"""

import copy
import json
import logging
import os

logger = logging.getLogger(__name__)


SETTINGS_PATH = os.path.join(os.path.dirname(__file__), 'settings.json')

DEFAULT_SETTINGS = {
    'window_width': 1024,
    'window_height': 512,
    'min_iters': 25,
    'inc_iters': 10,
    'palette_size': 64,
    'default_zoom': 200.0,
    'mandelbrot_palette': 'Sunset',
    'julia_palette': 'Hubble',
    'examples': [],
}


def load_settings(path=None):
    """
    Load settings from a JSON file merged over DEFAULT_SETTINGS.

    Args:
        path: Settings file to read (default: the packaged settings.json)

    Returns:
        dict of settings; the defaults if the file is missing or invalid
    """
    settings = copy.deepcopy(DEFAULT_SETTINGS)
    settings_path = path or SETTINGS_PATH
    try:
        with open(settings_path, 'r') as f:
            loaded = json.load(f)
    except (FileNotFoundError, json.JSONDecodeError) as e:
        logger.warning("Could not load %s: %s", settings_path, e)
        return settings

    if not isinstance(loaded, dict):
        logger.warning("Ignoring %s: expected a JSON object", settings_path)
        return settings

    unknown = set(loaded) - set(DEFAULT_SETTINGS)
    if unknown:
        logger.warning("Ignoring unknown settings: %s", ", ".join(sorted(unknown)))
    for key in DEFAULT_SETTINGS:
        if key in loaded:
            settings[key] = loaded[key]
    return settings
