"""Synchronization rule selection and run profile helpers."""

from .run_profiles import step_type_label
from .selector import (
    RuleCategory,
    RuleDirection,
    RuleFilter,
    SelectedRule,
    empty_direction_message,
    merge_by_name,
    section_title,
    select_sync_rules,
)

__all__ = [
    "RuleCategory",
    "RuleDirection",
    "RuleFilter",
    "SelectedRule",
    "empty_direction_message",
    "merge_by_name",
    "section_title",
    "select_sync_rules",
    "step_type_label",
]
