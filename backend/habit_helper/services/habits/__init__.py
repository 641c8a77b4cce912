"""
Habits module - schedule evaluation, state transitions and store reconciliation
"""
from . import repository
from . import schedule
from . import state
from . import reconciler

# Export commonly used functions for convenience
from .schedule import (
    evaluate,
    match_records_to_slots,
    schedule_changed,
    format_remaining
)

from .reconciler import HabitSession

__all__ = [
    # Modules
    'repository',
    'schedule',
    'state',
    'reconciler',

    # Evaluation
    'evaluate',
    'match_records_to_slots',
    'schedule_changed',
    'format_remaining',

    # Sessions
    'HabitSession'
]
