"""
GeoExtract Exceptions

Exception hierarchy for error handling.

Open failures, missing raster data and empty results are returned as values
(invalid handles, ``NO_DATA``, empty lists). Exceptions are reserved for
misuse of the engine and for unwrapping tagged results.
"""


class GeoExtractError(Exception):
    """Base exception for GeoExtract"""

    pass


class InvalidHandleError(GeoExtractError):
    """A dataset or layer handle could not be opened or was closed"""

    pass


class NoDataError(GeoExtractError):
    """No raster data is available for the requested region"""

    pass


class GeometryTypeError(GeoExtractError, TypeError):
    """A geometry accessor was used on a feature of another geometry type"""

    pass


class ConfigurationError(GeoExtractError):
    """Configuration value is invalid"""

    pass
