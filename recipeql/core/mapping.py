"""Mapping dimensions: canonical names resolved per model to real dimensions.

A mapping is referenced as ":<mapping>" (e.g. ":primary_key"). The prefix
cannot appear in a legal dimension name, so declared dimensions never clash
with mapping references.
"""

from enum import Enum

MAPPING_PREFIX = ":"


class CommonMapping(str, Enum):
    """Canonical concepts a model can map onto one of its dimensions."""

    PRIMARY_KEY = "primary_key"
    EVENT_TIMESTAMP = "event_timestamp"
    INCREMENTAL = "incremental"
    USER_ID = "user_id"
    DEVICE_ID = "device_id"

    @property
    def reference(self) -> str:
        """Dimension name that resolves through this mapping."""
        return MAPPING_PREFIX + self.value


def get_mapping_dimension(name: str) -> CommonMapping | None:
    """Return the mapping a dimension reference points at, or None for plain names."""
    if not name.startswith(MAPPING_PREFIX):
        return None
    try:
        return CommonMapping(name[len(MAPPING_PREFIX) :])
    except ValueError:
        return None
