"""Service layer: access rules, retrieval, prompt assembly and chat orchestration."""

from .exceptions import SalonError, NotFoundError, ValidationFailure, UpstreamFailure
from .knowledge_filter import filter_relevant_knowledge
from .prompt_assembly import PromptAssemblyService, AssembledPrompt
from .character_service import CharacterService
from .conversation_service import ConversationService
from .group_chat_service import GroupChatService
from .chat_orchestrator import ChatOrchestrator

__all__ = [
    "SalonError",
    "NotFoundError",
    "ValidationFailure",
    "UpstreamFailure",
    "filter_relevant_knowledge",
    "PromptAssemblyService",
    "AssembledPrompt",
    "CharacterService",
    "ConversationService",
    "GroupChatService",
    "ChatOrchestrator",
]
