"""
Data layer module for loading and filtering audit action tables.
"""
from auditbot.data.actions import (
    FilterResult,
    ActionFilter,
    load_actions,
    prepare_actions,
    available_options,
    filter_actions,
    load_available_options,
)

__all__ = [
    "FilterResult",
    "ActionFilter",
    "load_actions",
    "prepare_actions",
    "available_options",
    "filter_actions",
    "load_available_options",
]
