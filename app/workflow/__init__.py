"""Transition tables and the bound-action dispatcher."""

from .dispatcher import ActionDispatcher, BoundAction, default_actions
from .state import TransitionRule, TransitionTable, ValidationStatus

__all__ = [
    "ActionDispatcher",
    "BoundAction",
    "TransitionRule",
    "TransitionTable",
    "ValidationStatus",
    "default_actions",
]
