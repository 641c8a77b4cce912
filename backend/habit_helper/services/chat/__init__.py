"""
Chat service module - habit coach conversations
Exports the main public interface for chat functionality
"""
from .service import process_user_input, create_new_conversation, request_coach_reply

__all__ = [
    'process_user_input',
    'create_new_conversation',
    'request_coach_reply'
]
