"""
Conversation processing for the habit coach
One request/response per message; the transcript lives with the caller
"""
from typing import Dict, Any, List
import logging

from habit_helper.core.config import settings
from habit_helper.core.dependencies import get_openai_client
from habit_helper.core.exceptions import ExternalServiceError
from habit_helper.utils.prompts import COACH_SYSTEM_PROMPT, COACH_GREETING, COACH_FALLBACK_MESSAGE

logger = logging.getLogger(__name__)

# Only user/assistant turns are forwarded to the model
_FORWARDED_ROLES = ("user", "assistant")


def _prepare_messages(conversation_history: List[Dict[str, Any]], user_input: str) -> List[Dict[str, str]]:
    """
    Build the message list for the LLM from the client transcript

    Args:
        conversation_history: Previous messages in conversation
        user_input: New user message text

    Returns:
        List of messages ready for LLM API call
    """
    messages = [{"role": "system", "content": COACH_SYSTEM_PROMPT}]
    for message in conversation_history:
        if message.get("role") in _FORWARDED_ROLES and message.get("content"):
            messages.append({"role": message["role"], "content": str(message["content"])})
    messages.append({"role": "user", "content": user_input})
    return messages


def request_coach_reply(messages: List[Dict[str, str]]) -> str:
    """
    Ask the LLM for a coach reply

    Raises:
        ExternalServiceError: If the API call fails or returns no text
    """
    try:
        response = get_openai_client().chat.completions.create(
            model=settings.LLM_MODEL,
            messages=messages
        )
        content = response.choices[0].message.content
    except Exception as e:
        logger.error(f"[CHAT] LLM request failed: {e}")
        raise ExternalServiceError(f"Coach reply failed: {e}")

    if not content or not content.strip():
        raise ExternalServiceError("Coach reply was empty")
    return content.strip()


def process_user_input(
    user_input: str,
    conversation_history: List[Dict[str, Any]]
) -> tuple[str, List[Dict[str, Any]]]:
    """
    Send one user message to the coach

    On failure a single fallback message is appended instead; there is no retry.

    Args:
        user_input: The user's message
        conversation_history: Client-held transcript

    Returns:
        Tuple of (response_text, updated_conversation_history)

    Raises:
        ValueError: If the message is blank
    """
    user_input = user_input.strip()
    if not user_input:
        raise ValueError("Message must not be blank")

    messages = _prepare_messages(conversation_history, user_input)
    history = list(conversation_history)
    history.append({"role": "user", "content": user_input})

    try:
        reply = request_coach_reply(messages)
    except ExternalServiceError:
        reply = COACH_FALLBACK_MESSAGE

    history.append({"role": "assistant", "content": reply})
    return reply, history


def create_new_conversation() -> List[Dict[str, Any]]:
    """Create a new transcript seeded with the coach greeting"""
    return [{"role": "assistant", "content": COACH_GREETING}]
