"""Models package for Salon Engine."""

from .user import User, UserRole
from .character import Character, KnowledgeEntry
from .conversation import Conversation, Message, MessageRole
from .group_chat import GroupChat, GroupChatParticipant, GroupChatMessage

__all__ = [
    "User",
    "UserRole",
    "Character",
    "KnowledgeEntry",
    "Conversation",
    "Message",
    "MessageRole",
    "GroupChat",
    "GroupChatParticipant",
    "GroupChatMessage",
]
