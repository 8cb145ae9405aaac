"""
Test suite for package configuration.

Tests cover:
- Default values
- reset()
- temp_config() restore behaviour and error handling
- validation_error() strict / warning modes
"""

import pytest
import trochia
from trochia import config, temp_config
from trochia.utils import validation_error


class TestDefaults:
    """Default configuration values."""

    def test_tolerances(self):
        assert config.EQUALITY_RTOL == 1e-12
        assert config.EQUALITY_ATOL == 1e-14

    def test_hash_decimals_from_atol(self):
        """HASH_DECIMALS is derived from EQUALITY_ATOL."""
        assert config.HASH_DECIMALS == 12

    def test_solver_defaults(self):
        assert config.KEPLER_METHOD == 'newton'
        assert config.KEPLER_FIXED_POINT_ITER == 5

    def test_propulsion_defaults(self):
        assert config.STANDARD_GRAVITY == 9.81
        assert config.DEFAULT_ISP == 300.0

    def test_repr_lists_settings(self):
        text = repr(config)
        assert "TrochiaConfig" in text
        assert "KEPLER_METHOD" in text


class TestReset:
    """config.reset() restores package defaults."""

    def test_reset(self):
        config.KEPLER_MAX_ITER = 3
        config.DEFAULT_ORBIT_POINTS = 7
        config.reset()
        assert config.KEPLER_MAX_ITER == 20
        assert config.DEFAULT_ORBIT_POINTS == 64


class TestTempConfig:
    """temp_config() context manager."""

    def test_values_applied_inside_block(self):
        with temp_config(KEPLER_METHOD='fixed_point'):
            assert config.KEPLER_METHOD == 'fixed_point'

    def test_values_restored_after_block(self):
        with temp_config(KEPLER_METHOD='fixed_point', DEFAULT_ISP=450.0):
            pass
        assert config.KEPLER_METHOD == 'newton'
        assert config.DEFAULT_ISP == 300.0

    def test_values_restored_after_exception(self):
        with pytest.raises(RuntimeError):
            with temp_config(STRICT_VALIDATION=False):
                raise RuntimeError("boom")
        assert config.STRICT_VALIDATION is True

    def test_unknown_key_raises(self):
        with pytest.raises(AttributeError, match="no attribute"):
            with temp_config(NOT_A_SETTING=1):
                pass

    def test_shared_with_package(self):
        """The package exposes the same config instance."""
        assert trochia.config is config


class TestValidationError:
    """validation_error() follows STRICT_VALIDATION."""

    def test_strict_raises(self):
        with pytest.raises(ValueError, match="bad value"):
            validation_error("bad value")

    def test_custom_error_class(self):
        with pytest.raises(TypeError):
            validation_error("wrong type", TypeError)

    def test_lenient_warns(self):
        with temp_config(STRICT_VALIDATION=False):
            with pytest.warns(UserWarning, match="bad value"):
                validation_error("bad value")
