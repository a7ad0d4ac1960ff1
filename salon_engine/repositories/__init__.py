"""Repository pattern for database operations."""

from .user_repository import UserRepository
from .character_repository import CharacterRepository
from .knowledge_repository import KnowledgeRepository
from .conversation_repository import ConversationRepository
from .message_repository import MessageRepository
from .group_chat_repository import GroupChatRepository
from .group_message_repository import GroupMessageRepository

__all__ = [
    "UserRepository",
    "CharacterRepository",
    "KnowledgeRepository",
    "ConversationRepository",
    "MessageRepository",
    "GroupChatRepository",
    "GroupMessageRepository",
]
