"""
Tests for exceptions
"""

import pytest

from geoextract.core.exceptions import (
    ConfigurationError,
    GeoExtractError,
    GeometryTypeError,
    InvalidHandleError,
    NoDataError,
)


class TestExceptions:
    """Test exception hierarchy"""

    def test_base_exception(self):
        """Test GeoExtractError"""
        with pytest.raises(GeoExtractError):
            raise GeoExtractError("Test error")

    def test_invalid_handle_error(self):
        """Test InvalidHandleError inherits from GeoExtractError"""
        with pytest.raises(GeoExtractError):
            raise InvalidHandleError("Could not open")

    def test_no_data_error(self):
        """Test NoDataError inherits from GeoExtractError"""
        with pytest.raises(GeoExtractError):
            raise NoDataError("Outside extent")

    def test_geometry_type_error_is_type_error(self):
        """Test GeometryTypeError is both a GeoExtractError and a TypeError"""
        with pytest.raises(TypeError):
            raise GeometryTypeError("Not a line")

        with pytest.raises(GeoExtractError):
            raise GeometryTypeError("Not a line")

    def test_configuration_error(self):
        """Test ConfigurationError inherits from GeoExtractError"""
        with pytest.raises(GeoExtractError):
            raise ConfigurationError("Bad value")

    def test_exception_messages(self):
        """Test exception messages are preserved"""
        msg = "Custom error message"

        try:
            raise NoDataError(msg)
        except NoDataError as e:
            assert str(e) == msg
