"""
Settings Tests
"""

import json
import logging

from refract.palette import list_palette_names
from refract.settings import DEFAULT_SETTINGS, load_settings


def test_packaged_settings():
    settings = load_settings()
    assert settings['min_iters'] == 25
    assert settings['inc_iters'] == 10
    assert settings['palette_size'] == 64
    assert len(settings['examples']) == 5
    assert settings['mandelbrot_palette'] in list_palette_names()
    assert settings['julia_palette'] in list_palette_names()
    for example in settings['examples']:
        assert example['zoom'] > 0


def test_missing_file_uses_defaults(tmp_path, caplog):
    with caplog.at_level(logging.WARNING):
        settings = load_settings(str(tmp_path / "missing.json"))
    assert settings == DEFAULT_SETTINGS
    assert "Could not load" in caplog.text


def test_invalid_json_uses_defaults(tmp_path, caplog):
    path = tmp_path / "settings.json"
    path.write_text("{not json")
    with caplog.at_level(logging.WARNING):
        settings = load_settings(str(path))
    assert settings == DEFAULT_SETTINGS
    assert caplog.records


def test_partial_override(tmp_path, caplog):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"min_iters": 50, "colour": "blue"}))
    with caplog.at_level(logging.WARNING):
        settings = load_settings(str(path))
    assert settings['min_iters'] == 50
    assert settings['inc_iters'] == DEFAULT_SETTINGS['inc_iters']
    assert 'colour' not in settings
    assert "colour" in caplog.text


def test_defaults_not_mutated(tmp_path):
    settings = load_settings(str(tmp_path / "missing.json"))
    settings['examples'].append({"zoom": 1})
    assert DEFAULT_SETTINGS['examples'] == []
