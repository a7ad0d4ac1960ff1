"""
Prompt Assembly Service

Builds the message list sent to the LLM for:
- One-on-one conversations: character system prompt + matched knowledge,
  followed by the full stored history with roles unchanged
- Group chats: character system prompt + topic + participant roster +
  matched knowledge, followed by a short window of recent turns

Group history is flattened: every prior turn, whoever wrote it, is sent as a
"user" message prefixed with the author's name. The model sees the group as
a transcript rather than as its own earlier replies.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Dict, Optional, Sequence

from salon_engine.models.character import Character, KnowledgeEntry
from salon_engine.models.conversation import Message
from salon_engine.models.group_chat import GroupChat, GroupChatMessage

logger = logging.getLogger(__name__)

KNOWLEDGE_HEADER = "\n\nRelevant knowledge:\n"
TOPIC_TEMPLATE = "\n\nDiscussion topic: {topic}"
ROSTER_TEMPLATE = "\n\nYou are participating in a group discussion with: {names}"
HUMAN_AUTHOR = "User"
UNKNOWN_CHARACTER_AUTHOR = "Character"

DEFAULT_GROUP_HISTORY_WINDOW = 10
DEFAULT_GROUP_RETRIEVAL_WINDOW = 5


@dataclass
class AssembledPrompt:
    """Components of an assembled prompt."""
    system_prompt: str
    messages: List[Dict[str, str]]
    knowledge: List[KnowledgeEntry] = field(default_factory=list)


def render_knowledge_block(entries: Sequence[KnowledgeEntry]) -> str:
    """Render matched knowledge as the block appended to a system prompt ('' if none)."""
    if not entries:
        return ""
    return KNOWLEDGE_HEADER + "\n".join(f"{entry.title}: {entry.content}" for entry in entries)


class PromptAssemblyService:
    """
    Assembles complete prompts for LLM generation.

    Stateless apart from the two group window sizes, so one instance can be
    shared by every request.
    """

    def __init__(
        self,
        group_history_window: int = DEFAULT_GROUP_HISTORY_WINDOW,
        group_retrieval_window: int = DEFAULT_GROUP_RETRIEVAL_WINDOW,
    ):
        """
        Args:
            group_history_window: Most recent group messages sent as history
            group_retrieval_window: Most recent group messages used as the knowledge query
        """
        self.group_history_window = group_history_window
        self.group_retrieval_window = group_retrieval_window

    def build_conversation_prompt(
        self,
        character: Character,
        history: Sequence[Message],
        knowledge: Sequence[KnowledgeEntry] = (),
    ) -> AssembledPrompt:
        """
        Build the prompt for a one-on-one reply.

        Args:
            character: Character being spoken to
            history: Every stored message of the conversation, oldest first
            knowledge: Entries already selected by the relevance filter

        Returns:
            AssembledPrompt whose messages start with the system instruction
        """
        system_prompt = character.system_prompt + render_knowledge_block(knowledge)

        messages = [{"role": "system", "content": system_prompt}]
        for message in history:
            role = message.role.value if hasattr(message.role, "value") else message.role
            messages.append({"role": role, "content": message.content})

        logger.debug(
            f"Assembled conversation prompt: character={character.id}, "
            f"history={len(history)}, knowledge={len(knowledge)}"
        )
        return AssembledPrompt(system_prompt=system_prompt, messages=messages, knowledge=list(knowledge))

    def group_retrieval_query(self, history: Sequence[GroupChatMessage]) -> str:
        """
        Join the most recent group messages into one knowledge query.

        Args:
            history: Group messages, oldest first

        Returns:
            Contents of the last N messages joined by single spaces
        """
        recent = list(history)[-self.group_retrieval_window:]
        return " ".join(message.content for message in recent)

    def build_group_prompt(
        self,
        character: Character,
        group_chat: GroupChat,
        participants: Sequence[Optional[Character]],
        history: Sequence[GroupChatMessage],
        knowledge: Sequence[KnowledgeEntry] = (),
    ) -> AssembledPrompt:
        """
        Build the prompt for one character's turn in a group chat.

        The roster lists every participant, the speaking character included.

        Args:
            character: Character whose reply is being generated
            group_chat: The group chat (topic is read from here)
            participants: Participant characters in roster order (None for deleted ones)
            history: Group messages, oldest first (only the last window is used)
            knowledge: Entries already selected by the relevance filter

        Returns:
            AssembledPrompt whose messages start with the system instruction
        """
        present = [p for p in participants if p is not None]

        system_prompt = character.system_prompt
        if group_chat.topic:
            system_prompt += TOPIC_TEMPLATE.format(topic=group_chat.topic)
        names = ", ".join(p.name for p in present if p.name)
        system_prompt += ROSTER_TEMPLATE.format(names=names)
        system_prompt += render_knowledge_block(knowledge)

        names_by_id = {p.id: p.name for p in present}
        messages = [{"role": "system", "content": system_prompt}]
        for message in list(history)[-self.group_history_window:]:
            if message.character_id is not None:
                author = names_by_id.get(message.character_id) or UNKNOWN_CHARACTER_AUTHOR
            else:
                author = HUMAN_AUTHOR
            messages.append({"role": "user", "content": f"{author}: {message.content}"})

        logger.debug(
            f"Assembled group prompt: group_chat={group_chat.id}, character={character.id}, "
            f"participants={len(present)}, history={len(messages) - 1}, knowledge={len(knowledge)}"
        )
        return AssembledPrompt(system_prompt=system_prompt, messages=messages, knowledge=list(knowledge))
