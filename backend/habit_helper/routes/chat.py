"""
Chat Routes - Habit coach conversation endpoints
"""
import logging
from fastapi import APIRouter, HTTPException
from habit_helper.models.chat import (
    ChatRequest,
    ChatResponse,
    NewConversationResponse
)
from habit_helper.services.chat import process_user_input, create_new_conversation

# Configure logging
logger = logging.getLogger(__name__)

# Create router
router = APIRouter(prefix="/chat", tags=["chat"])


@router.post("/message", response_model=ChatResponse)
def send_message(request: ChatRequest):
    """
    Send a message to the habit coach and return the reply

    The transcript is kept by the client and sent with every request; nothing
    is stored on the server. If the coach cannot answer, a fallback message is
    appended instead.

    Examples:
        New conversation:
        ```json
        {
            "message": "I keep forgetting my evening walk",
            "conversation_history": null
        }
        ```

        Continuing conversation:
        ```json
        {
            "message": "Maybe right after dinner?",
            "conversation_history": [
                {"role": "assistant", "content": "Hi! I'm your ADHD habit coach..."},
                {"role": "user", "content": "I keep forgetting my evening walk"},
                {"role": "assistant", "content": "That happens a lot..."}
            ]
        }
        ```
    """
    conversation_history = request.conversation_history
    if conversation_history is None:
        logger.info("[CHAT] Creating new conversation")
        conversation_history = create_new_conversation()

    logger.info(f"[CHAT] Processing message: {request.message[:100]}...")

    try:
        response_text, updated_history = process_user_input(request.message, conversation_history)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    logger.info(f"[CHAT] Response generated: {response_text[:100]}...")

    return ChatResponse(
        response=response_text,
        conversation_history=updated_history
    )


@router.post("/conversation", response_model=NewConversationResponse)
def create_conversation():
    """
    Create a new conversation seeded with the coach greeting

    Example response:
        ```json
        {
            "conversation_history": [
                {"role": "assistant", "content": "Hi! I'm your ADHD habit coach..."}
            ],
            "message": "New conversation created"
        }
        ```
    """
    logger.info("[CHAT] Creating new conversation")
    return NewConversationResponse(
        conversation_history=create_new_conversation(),
        message="New conversation created"
    )
