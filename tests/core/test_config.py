"""
Tests for ExtractionConfig
"""

import pytest

from geoextract.core.config import ExtractionConfig, get_config, set_config
from geoextract.core.exceptions import ConfigurationError


class TestExtractionConfig:
    """Test configuration loading"""

    def test_defaults(self):
        """Test default configuration values"""
        config = ExtractionConfig()
        assert config.nodata_value == 0
        assert config.pyramid_tile_size == 256
        assert config.gdal_options == {}

    def test_invalid_tile_size(self):
        """Test that a non-positive tile size is rejected"""
        with pytest.raises(ConfigurationError):
            ExtractionConfig(pyramid_tile_size=0)

    def test_dict_round_trip(self):
        """Test to_dict/from_dict round trip"""
        config = ExtractionConfig(nodata_value=-9999.0, pyramid_tile_size=512,
                                  gdal_options={"GDAL_CACHEMAX": "64"})
        assert ExtractionConfig.from_dict(config.to_dict()) == config

    def test_from_env(self):
        """Test reading GEOEXTRACT_* variables"""
        env = {
            "GEOEXTRACT_NODATA": "-1",
            "GEOEXTRACT_PYRAMID_TILE_SIZE": "128",
            "GEOEXTRACT_GDAL_GDAL_CACHEMAX": "64",
            "UNRELATED": "x",
        }
        config = ExtractionConfig.from_env(env)
        assert config.nodata_value == -1.0
        assert config.pyramid_tile_size == 128
        assert config.gdal_options == {"GDAL_CACHEMAX": "64"}

    def test_from_env_empty(self):
        """Test that an empty environment gives the defaults"""
        assert ExtractionConfig.from_env({}) == ExtractionConfig()

    def test_from_env_invalid_number(self):
        """Test that unparsable numbers raise ConfigurationError"""
        with pytest.raises(ConfigurationError):
            ExtractionConfig.from_env({"GEOEXTRACT_PYRAMID_TILE_SIZE": "big"})

    def test_process_default(self):
        """Test replacing the process-wide configuration"""
        custom = ExtractionConfig(nodata_value=5)
        set_config(custom)
        try:
            assert get_config() is custom
        finally:
            set_config(None)
        assert get_config() is not custom
