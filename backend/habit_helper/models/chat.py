"""
Chat Models - Request/Response schemas for chat endpoints
"""
from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any


class ChatRequest(BaseModel):
    """Request to process a chat message"""
    message: str = Field(..., min_length=1, description="User message to process")
    conversation_history: Optional[List[Dict[str, Any]]] = Field(
        default=None,
        description="Client-held transcript. If not provided, a new conversation is created."
    )


class ChatResponse(BaseModel):
    """Response from chat processing"""
    response: str = Field(..., description="Coach's response text")
    conversation_history: List[Dict[str, Any]] = Field(
        ...,
        description="Updated conversation history including new messages"
    )


class NewConversationResponse(BaseModel):
    """Response for new conversation creation"""
    conversation_history: List[Dict[str, Any]] = Field(
        ...,
        description="New conversation history with the coach greeting"
    )
    message: str = Field(
        default="New conversation created",
        description="Status message"
    )
