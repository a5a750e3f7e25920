"""Dataset integrity and consistency checks."""

from networth_tracker.validation.validator import (
    DatasetValidator,
    check_consistency,
    get_user_friendly_summary,
)

__all__ = ["DatasetValidator", "check_consistency", "get_user_friendly_summary"]
