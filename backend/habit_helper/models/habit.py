"""
Pydantic models for habits and habit records
"""
from datetime import datetime
from enum import IntEnum
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from habit_helper.core.constants import PROVISIONAL_ID_PREFIX


class Weekday(IntEnum):
    """Day of week as stored in the habit `day` column (0 = Monday)"""
    MON = 0
    TUE = 1
    WED = 2
    THU = 3
    FRI = 4
    SAT = 5
    SUN = 6

    @property
    def label(self) -> str:
        return WEEKDAY_LABELS[self]


# Display labels, used only when rendering
WEEKDAY_LABELS = {
    Weekday.MON: "Mon",
    Weekday.TUE: "Tue",
    Weekday.WED: "Wed",
    Weekday.THU: "Thu",
    Weekday.FRI: "Fri",
    Weekday.SAT: "Sat",
    Weekday.SUN: "Sun",
}


def normalize_slot(value: str) -> str:
    """
    Normalize a time slot to zero-padded HH:MM

    Accepts "9:00", "09:00" and "09:00:00" (the store may append seconds).

    Raises:
        ValueError: If the value is not a valid time of day
    """
    parts = str(value).strip().split(":")
    if len(parts) not in (2, 3) or not all(p.isdigit() for p in parts):
        raise ValueError(f"Invalid time format '{value}'. Use HH:MM (24-hour format)")

    hours, minutes = int(parts[0]), int(parts[1])
    if not (0 <= hours <= 23 and 0 <= minutes <= 59):
        raise ValueError(f"Invalid time '{value}'. Use HH:MM (24-hour format)")
    return f"{hours:02d}:{minutes:02d}"


def _normalize_slot_list(values: Optional[List[str]]) -> List[str]:
    normalized = []
    for value in values or []:
        slot = normalize_slot(value)
        if slot not in normalized:
            normalized.append(slot)
    return normalized


class HabitRecord(BaseModel):
    """A logged outcome for a habit, optionally tagged with the slot it answers"""
    model_config = ConfigDict(populate_by_name=True)

    id: Union[int, str] = Field(..., description="Store id, or provisional id before confirmation")
    user_id: str
    habit_id: int
    outcome: bool = Field(..., alias="result", description="True for success, False for failure")
    created_at: datetime
    target_slot: Optional[str] = Field(None, alias="recordTime", description="Slot label in HH:MM")

    @field_validator("target_slot", mode="before")
    @classmethod
    def validate_target_slot(cls, v: Optional[str]) -> Optional[str]:
        if v is None or v == "":
            return None
        return normalize_slot(v)

    @property
    def is_provisional(self) -> bool:
        return isinstance(self.id, str) and self.id.startswith(PROVISIONAL_ID_PREFIX)


class Habit(BaseModel):
    """A recurring habit with its weekly schedule and today's records"""
    model_config = ConfigDict(populate_by_name=True)

    id: int
    user_id: Optional[str] = None
    name: str
    description: Optional[str] = None
    days: List[Weekday] = Field(default_factory=list, alias="day")
    slots: List[str] = Field(default_factory=list, alias="time")
    active: bool = Field(True, alias="activate")
    created_at: Optional[datetime] = None
    # Attached for display only, never written back to the store
    today_records: List[HabitRecord] = Field(default_factory=list, exclude=True)

    @field_validator("days", mode="before")
    @classmethod
    def validate_days(cls, v):
        return v or []

    @field_validator("slots", mode="before")
    @classmethod
    def validate_slots(cls, v: Optional[List[str]]) -> List[str]:
        return _normalize_slot_list(v)

    @property
    def days_display(self) -> List[str]:
        return [day.label for day in sorted(self.days)]


class HabitFields(BaseModel):
    """Editable habit fields shared by create and update requests"""
    name: str = Field(..., min_length=1, max_length=200, description="Habit name")
    description: Optional[str] = Field(None, description="Optional description")
    days: List[Weekday] = Field(default_factory=list, description="Enabled weekdays, 0 = Monday")
    slots: List[str] = Field(default_factory=list, description="Time slots in HH:MM format (24-hour)")
    active: bool = Field(True, description="Whether the habit is active")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Habit name must not be blank")
        return v

    @field_validator("days")
    @classmethod
    def validate_days(cls, v: List[Weekday]) -> List[Weekday]:
        return sorted(set(v))

    @field_validator("slots", mode="before")
    @classmethod
    def validate_slots(cls, v: Optional[List[str]]) -> List[str]:
        return _normalize_slot_list(v)

    def to_row(self) -> dict:
        """Serialize to the store's column names"""
        return {
            "name": self.name,
            "description": self.description,
            "day": [int(day) for day in self.days],
            "time": list(self.slots),
            "activate": self.active,
        }


class HabitCreateRequest(HabitFields):
    """Request model for adding a new habit"""
    pass


class HabitUpdateRequest(HabitFields):
    """Request model for editing a habit (full replacement of editable fields)"""
    pass


class RecordRequest(BaseModel):
    """Request model for recording a habit outcome"""
    outcome: bool = Field(..., description="True for success, False for failure")
    target_slot: Optional[str] = Field(None, description="Slot the record answers, HH:MM")

    @field_validator("target_slot", mode="before")
    @classmethod
    def validate_target_slot(cls, v: Optional[str]) -> Optional[str]:
        if v is None or v == "":
            return None
        return normalize_slot(v)
