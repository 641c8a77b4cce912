"""
Pydantic models for derived habit display state
"""
from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, Field


class DisplayState(str, Enum):
    """What the habit card should show right now"""
    DISABLED = "disabled"
    RESTING = "resting"
    AWAITING_INPUT = "awaiting_input"
    COUNTDOWN = "countdown"
    COMPLETED = "completed"
    DAY_ENDED = "day_ended"


class SlotState(str, Enum):
    MATCHED = "matched"
    PENDING = "pending"
    MISSED = "missed"


class SlotStatus(BaseModel):
    """Per-slot detail for a habit with time slots"""
    slot: str
    state: SlotState
    record_id: Optional[Union[int, str]] = None
    outcome: Optional[bool] = None


class HabitStatus(BaseModel):
    """Result of evaluating one habit at one instant"""
    state: DisplayState
    actionable_slot: Optional[str] = Field(None, description="Slot currently soliciting input or counted down to")
    minutes_remaining: Optional[int] = Field(None, description="Minutes until the counted-down slot")
    message: Optional[str] = Field(None, description="Human readable status line")
    slots: List[SlotStatus] = Field(default_factory=list)
