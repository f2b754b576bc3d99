"""
Engine configuration

Defaults used by dataset handles and the raster/pyramid engines. Values can
be supplied directly, from a dict, or from ``GEOEXTRACT_*`` environment
variables. ``GEOEXTRACT_GDAL_<OPTION>`` variables become GDAL configuration
options applied through ``rasterio.Env`` around every open and read.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Mapping

from geoextract.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

ENV_PREFIX = "GEOEXTRACT_"
GDAL_ENV_PREFIX = ENV_PREFIX + "GDAL_"


@dataclass
class ExtractionConfig:
    """
    Engine configuration

    Attributes:
        nodata_value: Fill value for out-of-extent pixels when the raster
                      declares no nodata value of its own
        pyramid_tile_size: Pixel width/height of the tiles in a raster pyramid
        gdal_options: GDAL configuration options (e.g. {"GDAL_CACHEMAX": 256})

    Examples:
        >>> config = ExtractionConfig(nodata_value=-9999.0)
        >>> config = ExtractionConfig.from_env()  # GEOEXTRACT_NODATA=-9999
    """

    nodata_value: float = 0
    pyramid_tile_size: int = 256
    gdal_options: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.pyramid_tile_size <= 0:
            raise ConfigurationError(
                f"pyramid_tile_size must be positive, got {self.pyramid_tile_size}"
            )

    def to_dict(self) -> dict[str, Any]:
        return {
            "nodata_value": self.nodata_value,
            "pyramid_tile_size": self.pyramid_tile_size,
            "gdal_options": dict(self.gdal_options),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ExtractionConfig":
        return cls(
            nodata_value=data.get("nodata_value", 0),
            pyramid_tile_size=data.get("pyramid_tile_size", 256),
            gdal_options=dict(data.get("gdal_options", {})),
        )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ExtractionConfig":
        """
        Build configuration from environment variables

        Args:
            environ: Mapping to read instead of ``os.environ``

        Raises:
            ConfigurationError: If a numeric variable cannot be parsed
        """
        env = os.environ if environ is None else environ
        data: dict[str, Any] = {}

        try:
            if ENV_PREFIX + "NODATA" in env:
                data["nodata_value"] = float(env[ENV_PREFIX + "NODATA"])
            if ENV_PREFIX + "PYRAMID_TILE_SIZE" in env:
                data["pyramid_tile_size"] = int(env[ENV_PREFIX + "PYRAMID_TILE_SIZE"])
        except ValueError as e:
            raise ConfigurationError(f"Invalid environment configuration: {e}") from e

        data["gdal_options"] = {
            key[len(GDAL_ENV_PREFIX):]: value
            for key, value in env.items()
            if key.startswith(GDAL_ENV_PREFIX)
        }
        return cls.from_dict(data)


_config: ExtractionConfig | None = None


def get_config() -> ExtractionConfig:
    """Process-wide default configuration (loaded from the environment once)"""
    global _config
    if _config is None:
        _config = ExtractionConfig.from_env()
        logger.debug("Loaded configuration: %s", _config)
    return _config


def set_config(config: ExtractionConfig | None) -> None:
    """Replace the process-wide default (``None`` reloads from the environment)"""
    global _config
    _config = config
