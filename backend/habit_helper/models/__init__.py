"""
Pydantic models for the application
"""
from habit_helper.models.habit import (
    Weekday,
    Habit,
    HabitRecord,
    HabitCreateRequest,
    HabitUpdateRequest,
    RecordRequest
)
from habit_helper.models.status import DisplayState, SlotState, SlotStatus, HabitStatus
from habit_helper.models.chat import (
    ChatRequest,
    ChatResponse,
    NewConversationResponse
)
from habit_helper.models.push import (
    PushSubscriptionData,
    PushSubscribeRequest,
    PushStatusResponse
)

__all__ = [
    "Weekday",
    "Habit",
    "HabitRecord",
    "HabitCreateRequest",
    "HabitUpdateRequest",
    "RecordRequest",
    "DisplayState",
    "SlotState",
    "SlotStatus",
    "HabitStatus",
    "ChatRequest",
    "ChatResponse",
    "NewConversationResponse",
    "PushSubscriptionData",
    "PushSubscribeRequest",
    "PushStatusResponse"
]
