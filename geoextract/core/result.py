"""
Query Results

Tagged results that keep apart the three outcomes a plain empty answer
conflates: a successful query with nothing in it, a region without raster
data, and a query against an invalid handle.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar

from geoextract.core.exceptions import InvalidHandleError, NoDataError

T = TypeVar("T")


class ResultStatus(Enum):
    OK = "ok"
    EMPTY = "empty"
    NO_DATA = "no_data"
    INVALID = "invalid"


@dataclass(frozen=True)
class QueryResult(Generic[T]):
    """
    Query result container

    Attributes:
        status: Outcome tag
        value: Feature list or RasterTile (empty list / None when not OK)
        message: Human-readable reason for non-OK outcomes

    Examples:
        >>> result = query_features_near(layer, 0.0, 0.0, 10.0, 10)
        >>> if result.status is ResultStatus.INVALID:
        ...     print(result.message)
        >>> features = result.unwrap()
    """

    status: ResultStatus
    value: Any = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.status in (ResultStatus.OK, ResultStatus.EMPTY)

    @property
    def is_empty(self) -> bool:
        return self.status is ResultStatus.EMPTY

    def unwrap(self) -> T:
        """
        Return the value of a successful result

        Raises:
            InvalidHandleError: If the handle was invalid
            NoDataError: If no raster data covered the region
        """
        if self.status is ResultStatus.INVALID:
            raise InvalidHandleError(self.message or "Invalid handle")
        if self.status is ResultStatus.NO_DATA:
            raise NoDataError(self.message or "No data for the requested region")
        return self.value

    @classmethod
    def of_features(cls, features: list) -> "QueryResult":
        return cls(ResultStatus.OK if features else ResultStatus.EMPTY, features)

    @classmethod
    def invalid(cls, message: str, empty: Any = None) -> "QueryResult":
        return cls(ResultStatus.INVALID, empty, message)

    @classmethod
    def no_data(cls, message: str = "") -> "QueryResult":
        return cls(ResultStatus.NO_DATA, None, message)
