"""
Tests for the character, conversation and group chat services.

Tests cover:
- Ownership and public readability of characters
- Partial character updates and knowledge management
- Conversation ownership and cascade delete
- Group chat creation rules (distinct participants, readability, atomicity)
"""

import pytest

from salon_engine.models.character import KnowledgeEntry
from salon_engine.models.conversation import Message, MessageRole
from salon_engine.models.group_chat import GroupChat, GroupChatParticipant
from salon_engine.repositories.message_repository import MessageRepository
from salon_engine.services.character_service import CharacterService
from salon_engine.services.conversation_service import ConversationService
from salon_engine.services.group_chat_service import GroupChatService
from salon_engine.services.exceptions import NotFoundError, ValidationFailure


class TestCharacterService:
    """Test suite for CharacterService."""

    def test_create_and_get_own_character(self, db_session, alice):
        service = CharacterService(db_session)

        character = service.create_character(alice.id, "Einstein", "You are Einstein")

        assert character.id is not None
        assert character.is_public is False
        assert service.get_character(alice.id, character.id).name == "Einstein"

    def test_blank_name_rejected(self, db_session, alice):
        service = CharacterService(db_session)

        with pytest.raises(ValidationFailure) as exc_info:
            service.create_character(alice.id, "   ", "You are nobody")

        assert exc_info.value.field == "name"

    def test_private_character_hidden_from_others(self, db_session, alice, bob):
        service = CharacterService(db_session)
        character = service.create_character(alice.id, "Secret", "You are secret")

        with pytest.raises(NotFoundError) as exc_info:
            service.get_character(bob.id, character.id)

        # Same message as a missing id
        assert str(exc_info.value) == "Character not found or unauthorized"

    def test_public_character_readable_but_not_editable(self, db_session, alice, bob):
        service = CharacterService(db_session)
        character = service.create_character(alice.id, "Socrates", "You are Socrates", is_public=True)

        assert service.get_character(bob.id, character.id).id == character.id
        with pytest.raises(NotFoundError):
            service.update_character(bob.id, character.id, {"name": "Hijacked"})
        with pytest.raises(NotFoundError):
            service.delete_character(bob.id, character.id)

    def test_list_characters_own_then_public(self, db_session, alice, bob):
        service = CharacterService(db_session)
        own = service.create_character(bob.id, "Mine", "prompt")
        public = service.create_character(alice.id, "Shared", "prompt", is_public=True)
        service.create_character(alice.id, "Hidden", "prompt")

        visible = service.list_characters(bob.id)

        assert [c.id for c in visible] == [own.id, public.id]

    def test_partial_update_ignores_missing_fields(self, db_session, alice):
        service = CharacterService(db_session)
        character = service.create_character(alice.id, "Kant", "You are Kant", description="Philosopher")

        updated = service.update_character(alice.id, character.id, {"is_public": True, "description": None})

        assert updated.is_public is True
        assert updated.description == "Philosopher"
        assert updated.name == "Kant"

    def test_knowledge_lifecycle(self, db_session, alice, bob):
        service = CharacterService(db_session)
        character = service.create_character(alice.id, "Einstein", "You are Einstein", is_public=True)

        entry = service.add_knowledge(alice.id, character.id, "Relativity", "E=mc^2", metadata={"source": "1905"})

        assert entry.meta_data == {"source": "1905"}
        assert [e.id for e in service.list_knowledge(bob.id, character.id)] == [entry.id]
        with pytest.raises(NotFoundError):
            service.add_knowledge(bob.id, character.id, "Forged", "nope")

        service.delete_knowledge(alice.id, character.id, entry.id)
        assert service.list_knowledge(alice.id, character.id) == []

    def test_delete_knowledge_of_another_character_rejected(self, db_session, alice):
        service = CharacterService(db_session)
        first = service.create_character(alice.id, "First", "prompt")
        second = service.create_character(alice.id, "Second", "prompt")
        entry = service.add_knowledge(alice.id, second.id, "Fact", "content")

        with pytest.raises(NotFoundError):
            service.delete_knowledge(alice.id, first.id, entry.id)

        assert db_session.get(KnowledgeEntry, entry.id) is not None

    def test_delete_character_removes_knowledge(self, db_session, alice):
        service = CharacterService(db_session)
        character = service.create_character(alice.id, "Einstein", "prompt")
        service.add_knowledge(alice.id, character.id, "Relativity", "E=mc^2")

        service.delete_character(alice.id, character.id)

        assert db_session.query(KnowledgeEntry).count() == 0


class TestConversationService:
    """Test suite for ConversationService."""

    def test_create_requires_readable_character(self, db_session, alice, bob):
        characters = CharacterService(db_session)
        private = characters.create_character(alice.id, "Private", "prompt")

        with pytest.raises(NotFoundError):
            ConversationService(db_session).create_conversation(bob.id, private.id)

    def test_conversation_private_to_owner(self, db_session, alice, bob):
        character = CharacterService(db_session).create_character(alice.id, "Public", "prompt", is_public=True)
        service = ConversationService(db_session)
        conversation = service.create_conversation(bob.id, character.id, "Chat")

        assert [c.id for c in service.list_conversations(bob.id)] == [conversation.id]
        assert service.list_conversations(alice.id) == []
        with pytest.raises(NotFoundError):
            service.get_conversation(alice.id, conversation.id)
        with pytest.raises(NotFoundError):
            service.list_messages(alice.id, conversation.id)

    def test_list_returns_every_conversation_newest_first(self, db_session, alice):
        character = CharacterService(db_session).create_character(alice.id, "Kant", "prompt")
        service = ConversationService(db_session)
        created = [service.create_conversation(alice.id, character.id, f"Chat {i}") for i in range(105)]

        listed = service.list_conversations(alice.id)

        assert len(listed) == 105
        assert [c.id for c in listed] == [c.id for c in reversed(created)]

    def test_title_too_long(self, db_session, alice):
        character = CharacterService(db_session).create_character(alice.id, "Kant", "prompt")

        with pytest.raises(ValidationFailure):
            ConversationService(db_session).create_conversation(alice.id, character.id, "x" * 256)

    def test_delete_removes_messages(self, db_session, alice):
        character = CharacterService(db_session).create_character(alice.id, "Kant", "prompt")
        service = ConversationService(db_session)
        conversation = service.create_conversation(alice.id, character.id)
        MessageRepository(db_session).create(conversation.id, MessageRole.USER, "hello")

        service.delete_conversation(alice.id, conversation.id)

        assert db_session.query(Message).count() == 0


class TestGroupChatService:
    """Test suite for GroupChatService."""

    def make_characters(self, db_session, user, *names, is_public=False):
        service = CharacterService(db_session)
        return [service.create_character(user.id, name, f"You are {name}", is_public=is_public) for name in names]

    def test_create_with_participants_in_order(self, db_session, alice):
        kant, mill = self.make_characters(db_session, alice, "Kant", "Mill")
        service = GroupChatService(db_session)

        group_chat = service.create_group_chat(alice.id, "Ethics night", [mill.id, kant.id], topic="Ethics")

        assert group_chat.topic == "Ethics"
        assert [c.name for c in service.get_participant_characters(group_chat.id)] == ["Mill", "Kant"]

    def test_fewer_than_two_characters_writes_nothing(self, db_session, alice):
        (kant,) = self.make_characters(db_session, alice, "Kant")
        service = GroupChatService(db_session)

        with pytest.raises(ValidationFailure):
            service.create_group_chat(alice.id, "Solo", [kant.id])
        with pytest.raises(ValidationFailure):
            service.create_group_chat(alice.id, "Echo", [kant.id, kant.id])

        assert db_session.query(GroupChat).count() == 0
        assert db_session.query(GroupChatParticipant).count() == 0

    def test_unreadable_character_writes_nothing(self, db_session, alice, bob):
        (kant,) = self.make_characters(db_session, alice, "Kant")
        (secret,) = self.make_characters(db_session, bob, "Secret")

        with pytest.raises(NotFoundError):
            GroupChatService(db_session).create_group_chat(alice.id, "Mixed", [kant.id, secret.id])

        assert db_session.query(GroupChat).count() == 0

    def test_public_characters_of_others_allowed(self, db_session, alice, bob):
        kant, mill = self.make_characters(db_session, bob, "Kant", "Mill", is_public=True)

        group_chat = GroupChatService(db_session).create_group_chat(alice.id, "Borrowed", [kant.id, mill.id])

        assert group_chat.user_id == alice.id

    def test_list_newest_first(self, db_session, alice):
        kant, mill = self.make_characters(db_session, alice, "Kant", "Mill")
        service = GroupChatService(db_session)
        first = service.create_group_chat(alice.id, "First", [kant.id, mill.id])
        second = service.create_group_chat(alice.id, "Second", [kant.id, mill.id])

        assert [g.id for g in service.list_group_chats(alice.id)] == [second.id, first.id]

    def test_group_chat_private_to_owner(self, db_session, alice, bob):
        kant, mill = self.make_characters(db_session, alice, "Kant", "Mill")
        service = GroupChatService(db_session)
        group_chat = service.create_group_chat(alice.id, "Ethics", [kant.id, mill.id])

        with pytest.raises(NotFoundError):
            service.get_group_chat(bob.id, group_chat.id)
        with pytest.raises(NotFoundError):
            service.send_message(bob.id, group_chat.id, "intruding")

    def test_send_message_is_human_turn(self, db_session, alice):
        kant, mill = self.make_characters(db_session, alice, "Kant", "Mill")
        service = GroupChatService(db_session)
        group_chat = service.create_group_chat(alice.id, "Ethics", [kant.id, mill.id])

        message = service.send_message(alice.id, group_chat.id, "Is lying ever right?")

        assert message.character_id is None
        assert [m.content for m in service.list_messages(alice.id, group_chat.id)] == ["Is lying ever right?"]

    def test_blank_message_rejected(self, db_session, alice):
        kant, mill = self.make_characters(db_session, alice, "Kant", "Mill")
        service = GroupChatService(db_session)
        group_chat = service.create_group_chat(alice.id, "Ethics", [kant.id, mill.id])

        with pytest.raises(ValidationFailure):
            service.send_message(alice.id, group_chat.id, "  ")

        assert service.list_messages(alice.id, group_chat.id) == []

    def test_deleted_character_resolves_to_none(self, db_session, alice):
        kant, mill = self.make_characters(db_session, alice, "Kant", "Mill")
        service = GroupChatService(db_session)
        group_chat = service.create_group_chat(alice.id, "Ethics", [kant.id, mill.id])

        CharacterService(db_session).delete_character(alice.id, mill.id)

        participants = service.get_participant_characters(group_chat.id)
        assert [p.name if p else None for p in participants] == ["Kant", None]
