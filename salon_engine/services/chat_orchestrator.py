"""
Chat Orchestrator

Runs one reply cycle per request:
    authorize -> persist user turn -> load character and history ->
    filter knowledge -> assemble prompt -> call LLM -> persist reply

Each step is committed as it happens. If the LLM call fails, the user's
message is already stored and stays stored; the caller gets an
UpstreamFailure and no assistant message is written. Nothing is retried.

No locking: two sends to the same conversation at once may interleave.
"""

import logging
from typing import List, Dict, Optional, Any
from sqlalchemy.orm import Session

from salon_engine.config.models import ChatConfig
from salon_engine.llm.base import BaseLLMClient, LLMError
from salon_engine.models.conversation import MessageRole
from salon_engine.models.group_chat import GroupChatMessage
from salon_engine.repositories.character_repository import CharacterRepository
from salon_engine.repositories.knowledge_repository import KnowledgeRepository
from salon_engine.repositories.message_repository import MessageRepository
from salon_engine.repositories.group_message_repository import GroupMessageRepository
from salon_engine.services.character_service import CharacterService
from salon_engine.services.conversation_service import ConversationService
from salon_engine.services.group_chat_service import GroupChatService
from salon_engine.services.knowledge_filter import filter_relevant_knowledge
from salon_engine.services.prompt_assembly import PromptAssemblyService
from salon_engine.services.exceptions import NotFoundError, UpstreamFailure, require_text
from salon_engine.utils.debug_logger import DebugLogger

logger = logging.getLogger(__name__)


class ChatOrchestrator:
    """Coordinates knowledge filtering, prompt assembly, the LLM call and persistence."""

    def __init__(
        self,
        db: Session,
        llm_client: BaseLLMClient,
        chat_config: Optional[ChatConfig] = None,
        debug_logger: Optional[DebugLogger] = None,
    ):
        """
        Args:
            db: Database session for this request
            llm_client: Shared LLM client
            chat_config: Window sizes and fallback replies (defaults if omitted)
            debug_logger: Optional JSONL logger for every LLM interaction
        """
        self.db = db
        self.llm_client = llm_client
        self.chat_config = chat_config or ChatConfig()
        self.debug_logger = debug_logger

        self.prompt_assembler = PromptAssemblyService(
            group_history_window=self.chat_config.group_history_window,
            group_retrieval_window=self.chat_config.group_retrieval_window,
        )
        self.characters = CharacterRepository(db)
        self.knowledge = KnowledgeRepository(db)
        self.messages = MessageRepository(db)
        self.group_messages = GroupMessageRepository(db)
        self.character_service = CharacterService(db)
        self.conversation_service = ConversationService(db)
        self.group_chat_service = GroupChatService(db)

    async def send_message(self, user_id: int, conversation_id: int, content: str) -> str:
        """
        Send a user message in a conversation and return the character's reply.

        Args:
            user_id: Requesting user (must own the conversation)
            conversation_id: Conversation ID
            content: Message text

        Returns:
            Reply text (the configured fallback if the LLM returned no text)

        Raises:
            ValidationFailure: Blank content (nothing written)
            NotFoundError: Conversation not owned (nothing written), or its
                character no longer exists (user message already written)
            UpstreamFailure: LLM call failed (user message already written)
        """
        require_text(content, "content")
        conversation = self.conversation_service.get_conversation(user_id, conversation_id)

        user_message = self.messages.create(
            conversation_id=conversation.id,
            role=MessageRole.USER,
            content=content
        )

        character = self.characters.get_by_id(conversation.character_id)
        if not character:
            raise NotFoundError("Character", conversation.character_id)

        history = self.messages.list_by_conversation(conversation.id)
        knowledge = filter_relevant_knowledge(content, self.knowledge.list_by_character(character.id))
        prompt = self.prompt_assembler.build_conversation_prompt(character, history, knowledge)

        logger.info(
            f"[CHAT] conversation={conversation.id} character={character.id} "
            f"user_message={user_message.id} history={len(history)} knowledge={len(knowledge)}"
        )

        reply = await self._complete(
            prompt.messages,
            fallback=self.chat_config.reply_fallback,
            log_key=f"conversation_{conversation.id}",
            interaction_type="chat",
            metadata={
                "character_id": character.id,
                "knowledge_ids": [entry.id for entry in knowledge],
            },
        )

        self.messages.create(
            conversation_id=conversation.id,
            role=MessageRole.ASSISTANT,
            content=reply
        )
        return reply

    def send_group_message(self, user_id: int, group_chat_id: int, content: str) -> GroupChatMessage:
        """Post a human turn to a group chat (no LLM call)."""
        return self.group_chat_service.send_message(user_id, group_chat_id, content)

    async def generate_group_response(self, user_id: int, group_chat_id: int, character_id: int) -> str:
        """
        Have one character speak next in a group chat.

        Args:
            user_id: Requesting user (must own the group chat)
            group_chat_id: Group chat ID
            character_id: Character whose turn it is

        Returns:
            Reply text (the configured fallback if the LLM returned no text)

        Raises:
            NotFoundError: Group chat not owned, or character missing/unreadable
            UpstreamFailure: LLM call failed (nothing written)
        """
        group_chat = self.group_chat_service.get_group_chat(user_id, group_chat_id)
        character = self.character_service.get_character(user_id, character_id)

        window = max(self.chat_config.group_history_window, self.chat_config.group_retrieval_window)
        history = self.group_messages.list_recent(group_chat.id, window)
        participants = self.group_chat_service.get_participant_characters(group_chat.id)

        query = self.prompt_assembler.group_retrieval_query(history)
        knowledge = filter_relevant_knowledge(query, self.knowledge.list_by_character(character.id))
        prompt = self.prompt_assembler.build_group_prompt(
            character,
            group_chat,
            participants,
            history,
            knowledge,
        )

        logger.info(
            f"[GROUP CHAT] group_chat={group_chat.id} character={character.id} "
            f"history={len(prompt.messages) - 1} knowledge={len(knowledge)}"
        )

        reply = await self._complete(
            prompt.messages,
            fallback=self.chat_config.group_reply_fallback,
            log_key=f"group_{group_chat.id}",
            interaction_type="group_chat",
            metadata={
                "character_id": character.id,
                "knowledge_ids": [entry.id for entry in knowledge],
            },
        )

        self.group_messages.create(
            group_chat_id=group_chat.id,
            content=reply,
            character_id=character.id
        )
        return reply

    async def _complete(
        self,
        messages: List[Dict[str, str]],
        fallback: str,
        log_key: str,
        interaction_type: str,
        metadata: Dict[str, Any],
    ) -> str:
        """Call the LLM once and return its text, or the fallback if it has none."""
        try:
            response = await self.llm_client.generate_with_history(messages)
        except LLMError as e:
            logger.error(f"LLM generation failed for {log_key}: {e}")
            self._log_interaction(log_key, interaction_type, None, messages, None, metadata, error=str(e))
            raise UpstreamFailure("Failed to generate response") from e

        reply = response.content
        if not isinstance(reply, str):
            logger.warning(f"LLM returned no completion text for {log_key}, using fallback reply")
            reply = fallback

        self._log_interaction(log_key, interaction_type, response.model, messages, reply, metadata)
        return reply

    def _log_interaction(
        self,
        log_key: str,
        interaction_type: str,
        model: Optional[str],
        messages: List[Dict[str, str]],
        response: Optional[str],
        metadata: Dict[str, Any],
        error: Optional[str] = None,
    ) -> None:
        if self.debug_logger is None:
            return
        self.debug_logger.log_llm_interaction(
            log_key=log_key,
            interaction_type=interaction_type,
            model=model,
            messages=messages,
            response=response,
            metadata=metadata,
            error=error,
        )
