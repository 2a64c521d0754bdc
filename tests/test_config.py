"""Unit tests for PipelineConfig."""

import pytest

from image_helper.config import DEFAULT_GRID, PipelineConfig


class TestPipelineConfig:
    def test_defaults(self):
        config = PipelineConfig()
        assert config.default_grid == DEFAULT_GRID == (16, 16)
        assert config.batch_timeout is None
        assert config.strict_bounds is False
        assert config.settle_ticks == 1

    @pytest.mark.parametrize("kwargs", [
        {"default_grid": (0, 16)},
        {"batch_timeout": 0},
        {"max_concurrent_loads": -1},
        {"settle_ticks": -1},
        {"settle_ticks": 0},
    ])
    def test_invalid(self, kwargs):
        with pytest.raises(ValueError):
            PipelineConfig(**kwargs)

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("IMAGE_HELPER_DEFAULT_GRID", "32x8")
        monkeypatch.setenv("IMAGE_HELPER_BATCH_TIMEOUT", "2.5")
        monkeypatch.setenv("IMAGE_HELPER_MAX_CONCURRENT_LOADS", "4")
        monkeypatch.setenv("IMAGE_HELPER_STRICT_BOUNDS", "yes")
        monkeypatch.setenv("IMAGE_HELPER_ENCODE_FORMAT", "webp")
        config = PipelineConfig.from_env()
        assert config.default_grid == (32, 8)
        assert config.batch_timeout == 2.5
        assert config.max_concurrent_loads == 4
        assert config.strict_bounds is True
        assert config.encode_format == "WEBP"

    def test_from_env_square_grid_and_no_timeout(self, monkeypatch):
        monkeypatch.setenv("IMAGE_HELPER_DEFAULT_GRID", "24")
        monkeypatch.setenv("IMAGE_HELPER_BATCH_TIMEOUT", "none")
        config = PipelineConfig.from_env()
        assert config.default_grid == (24, 24)
        assert config.batch_timeout is None
