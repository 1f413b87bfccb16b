"""Utility modules."""
from learncheck.utils.json_utils import (
    json_dump,
    json_load,
    ndjson_dump,
)
from learncheck.utils.time_utils import days_ago, utc_now
from learncheck.utils.validation import validate_id

__all__ = [
    "json_dump",
    "json_load",
    "ndjson_dump",
    "days_ago",
    "utc_now",
    "validate_id",
]
