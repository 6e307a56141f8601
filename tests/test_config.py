"""
Tests for configuration objects and logging setup.
"""
import logging
import math

import pytest

from vsvg.config import DEFAULT_TOLERANCE, GroupPolicy, VsvgConfig, validate_tolerance
from vsvg.errors import GeometryError
from vsvg.logging_config import setup_logging


class TestVsvgConfig:
    def test_defaults(self):
        """Defaults match the module constants."""
        config = VsvgConfig()
        assert config.tolerance == DEFAULT_TOLERANCE
        assert config.group_policy is GroupPolicy.TOP_LEVEL
        assert config.skip_hidden

    def test_policy_from_string(self):
        """Group policies may be given by value."""
        assert VsvgConfig(group_policy="single").group_policy is GroupPolicy.SINGLE
        with pytest.raises(ValueError):
            VsvgConfig(group_policy="everything")

    def test_invalid_values(self):
        """Invalid tolerances and stroke widths are rejected, not clamped."""
        with pytest.raises(GeometryError):
            VsvgConfig(tolerance=-0.1)
        with pytest.raises(GeometryError):
            VsvgConfig(default_stroke_width=math.inf)

    def test_dict_round_trip(self):
        """to_dict produces plain values accepted by from_dict."""
        config = VsvgConfig(tolerance=0.5, group_policy=GroupPolicy.INKSCAPE, skip_hidden=False)
        data = config.to_dict()
        assert data["group_policy"] == "inkscape"
        assert VsvgConfig.from_dict(data) == config

    def test_validate_tolerance(self):
        """Numeric strings are converted; zero is rejected."""
        assert validate_tolerance("0.25") == 0.25
        with pytest.raises(GeometryError):
            validate_tolerance(0)


class TestLogging:
    def test_setup_logging_is_idempotent(self, tmp_path):
        """Repeated setup replaces handlers instead of stacking them."""
        log_file = tmp_path / "vsvg.log"
        setup_logging(logging.DEBUG)
        logger = setup_logging(logging.DEBUG, str(log_file))
        try:
            assert logger.name == "vsvg"
            assert len(logger.handlers) == 2
            logger.debug("probe")
            for handler in logger.handlers:
                handler.flush()
            assert "probe" in log_file.read_text(encoding="utf-8")
        finally:
            for handler in list(logger.handlers):
                handler.close()
                logger.removeHandler(handler)
            logger.setLevel(logging.NOTSET)
