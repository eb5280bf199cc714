"""Post-operation definitions (query-time transforms applied to dimensions)."""

from enum import Enum

from pydantic import BaseModel, Field


class PostOperationType(str, Enum):
    """Kind of transform applied to a dimension."""

    TIMESTAMP = "TIMESTAMP"
    DATE = "DATE"
    TIME = "TIME"
    DATE_TRUNC = "DATE_TRUNC"


class Timeframe(str, Enum):
    """Timeframe a temporal post-operation buckets or extracts."""

    MINUTE = "MINUTE"
    HOUR = "HOUR"
    DAY = "DAY"
    WEEK = "WEEK"
    MONTH = "MONTH"
    QUARTER = "QUARTER"
    YEAR = "YEAR"
    HOUR_OF_DAY = "HOUR_OF_DAY"
    DAY_OF_WEEK = "DAY_OF_WEEK"
    DAY_OF_MONTH = "DAY_OF_MONTH"
    WEEK_OF_YEAR = "WEEK_OF_YEAR"
    MONTH_OF_YEAR = "MONTH_OF_YEAR"
    QUARTER_OF_YEAR = "QUARTER_OF_YEAR"


class PostOperation(BaseModel):
    """Transform applied to a dimension at query time.

    Example:
        PostOperation(type="DATE_TRUNC", value="MONTH")
    """

    model_config = {"frozen": True}

    type: PostOperationType = Field(..., description="Post-operation kind")
    value: Timeframe = Field(..., description="Timeframe the operation applies")
