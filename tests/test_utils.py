# tests/test_utils.py
import json
import logging

import numpy as np
import pytest

from utils import load_config, map_unit, setup_logging


def test_load_config_reads_json(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"layout": {"grid_divisions": 7}}), encoding="utf-8")
    assert load_config(str(path)) == {"layout": {"grid_divisions": 7}}


def test_load_config_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "nope.json"))


def test_load_config_bad_json(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(json.JSONDecodeError):
        load_config(str(path))


def test_shipped_config_is_valid():
    """The repository's config.json parses and builds a context."""
    from pathlib import Path
    from context import GenerationContext

    config = load_config(str(Path(__file__).resolve().parents[1] / "config.json"))
    ctx = GenerationContext(1, 900, 600, config["layout"], config["animation"])
    assert ctx.neighbors_per_wheel == 2


def test_setup_logging_creates_log_file(tmp_path):
    log_file = tmp_path / "logs" / "run.log"
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        setup_logging({"logging": {"level": "debug", "log_file": str(log_file)}})
        logging.info("hello from the test")
        for handler in root.handlers:
            handler.flush()
        assert root.level == logging.DEBUG
        assert "hello from the test" in log_file.read_text()
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)


def test_map_unit_endpoints_and_clipping():
    assert map_unit(0.0, 2.0, 4.0) == 2.0
    assert map_unit(1.0, 2.0, 4.0) == 4.0
    assert map_unit(0.5, -3.0, 3.0) == 0.0
    out = map_unit(np.array([0.0, 0.5, 1.0]), np.array([-1.0, -2.0, -3.0]), np.array([1.0, 2.0, 3.0]))
    np.testing.assert_allclose(out, [-1.0, 0.0, 3.0])
