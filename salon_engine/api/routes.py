"""API routes for characters, knowledge, conversations and group chats."""

import logging
from typing import List, Optional, Dict, Any
from datetime import datetime

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, ConfigDict
from sqlalchemy.orm import Session

from salon_engine.api.dependencies import get_db, get_current_user, get_chat_orchestrator
from salon_engine.models.character import KnowledgeEntry
from salon_engine.models.conversation import MessageRole
from salon_engine.models.user import User, UserRole
from salon_engine.services.character_service import CharacterService
from salon_engine.services.chat_orchestrator import ChatOrchestrator
from salon_engine.services.conversation_service import ConversationService
from salon_engine.services.group_chat_service import GroupChatService

logger = logging.getLogger(__name__)

router = APIRouter()


# Request/Response models

class UserResponse(BaseModel):
    """Current user."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    open_id: str
    name: Optional[str] = None
    email: Optional[str] = None
    role: UserRole
    last_signed_in: datetime


class CharacterCreate(BaseModel):
    """Create character request."""
    name: str
    system_prompt: str
    description: Optional[str] = None
    avatar_url: Optional[str] = None
    is_public: bool = False


class CharacterUpdate(BaseModel):
    """Partial character update; omitted fields are left unchanged."""
    name: Optional[str] = None
    system_prompt: Optional[str] = None
    description: Optional[str] = None
    avatar_url: Optional[str] = None
    is_public: Optional[bool] = None


class CharacterResponse(BaseModel):
    """Character response."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    name: str
    description: Optional[str] = None
    system_prompt: str
    avatar_url: Optional[str] = None
    is_public: bool
    created_at: datetime
    updated_at: datetime


class KnowledgeCreate(BaseModel):
    """Add knowledge entry request."""
    title: str
    content: str
    metadata: Optional[Dict[str, Any]] = None


class KnowledgeResponse(BaseModel):
    """Knowledge entry response."""
    id: int
    character_id: int
    title: str
    content: str
    metadata: Optional[Dict[str, Any]] = None
    created_at: datetime

    @classmethod
    def from_entry(cls, entry: KnowledgeEntry) -> "KnowledgeResponse":
        # ORM objects expose SQLAlchemy's MetaData as .metadata, so map explicitly
        return cls(
            id=entry.id,
            character_id=entry.character_id,
            title=entry.title,
            content=entry.content,
            metadata=entry.meta_data,
            created_at=entry.created_at,
        )


class ConversationCreate(BaseModel):
    """Create conversation request."""
    character_id: int
    title: Optional[str] = None


class ConversationResponse(BaseModel):
    """Conversation response."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    character_id: int
    title: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class MessageResponse(BaseModel):
    """Message response."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    conversation_id: int
    role: MessageRole
    content: str
    created_at: datetime


class SendMessageRequest(BaseModel):
    """Send a message."""
    content: str


class ReplyResponse(BaseModel):
    """Generated reply."""
    content: str


class GroupChatCreate(BaseModel):
    """Create group chat request."""
    name: str
    character_ids: List[int]
    description: Optional[str] = None
    topic: Optional[str] = None


class GroupChatResponse(BaseModel):
    """Group chat response."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    name: str
    description: Optional[str] = None
    topic: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class GroupChatDetailResponse(GroupChatResponse):
    """Group chat with its participant characters."""
    characters: List[CharacterResponse]


class GroupMessageResponse(BaseModel):
    """Group chat message response."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    group_chat_id: int
    character_id: Optional[int] = None
    content: str
    created_at: datetime


class GenerateResponseRequest(BaseModel):
    """Ask a character to speak next."""
    character_id: int


# === Auth ===

@router.get("/auth/me", response_model=UserResponse)
async def get_me(user: User = Depends(get_current_user)):
    """Return the calling user."""
    return user


# === Character Endpoints ===

@router.post("/characters", response_model=CharacterResponse)
async def create_character(
    request: CharacterCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Create a character owned by the caller."""
    return CharacterService(db).create_character(
        user_id=user.id,
        name=request.name,
        system_prompt=request.system_prompt,
        description=request.description,
        avatar_url=request.avatar_url,
        is_public=request.is_public
    )


@router.get("/characters", response_model=List[CharacterResponse])
async def list_characters(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List the caller's characters plus everyone's public characters."""
    return CharacterService(db).list_characters(user.id)


@router.get("/characters/{character_id}", response_model=CharacterResponse)
async def get_character(
    character_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get a character the caller owns or that is public."""
    return CharacterService(db).get_character(user.id, character_id)


@router.patch("/characters/{character_id}", response_model=CharacterResponse)
async def update_character(
    character_id: int,
    request: CharacterUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Update an owned character."""
    updates = request.model_dump(exclude_unset=True)
    return CharacterService(db).update_character(user.id, character_id, updates)


@router.delete("/characters/{character_id}")
async def delete_character(
    character_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Delete an owned character and its knowledge."""
    CharacterService(db).delete_character(user.id, character_id)
    return {"status": "deleted", "id": character_id}


# === Knowledge Endpoints ===

@router.post("/characters/{character_id}/knowledge", response_model=KnowledgeResponse)
async def add_knowledge(
    character_id: int,
    request: KnowledgeCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Add a knowledge entry to an owned character."""
    entry = CharacterService(db).add_knowledge(
        user_id=user.id,
        character_id=character_id,
        title=request.title,
        content=request.content,
        metadata=request.metadata
    )
    return KnowledgeResponse.from_entry(entry)


@router.get("/characters/{character_id}/knowledge", response_model=List[KnowledgeResponse])
async def list_knowledge(
    character_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List knowledge of an owned or public character."""
    entries = CharacterService(db).list_knowledge(user.id, character_id)
    return [KnowledgeResponse.from_entry(entry) for entry in entries]


@router.delete("/characters/{character_id}/knowledge/{entry_id}")
async def delete_knowledge(
    character_id: int,
    entry_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Delete a knowledge entry from an owned character."""
    CharacterService(db).delete_knowledge(user.id, character_id, entry_id)
    return {"status": "deleted", "id": entry_id}


# === Conversation Endpoints ===

@router.post("/conversations", response_model=ConversationResponse)
async def create_conversation(
    request: ConversationCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Start a conversation with a character."""
    return ConversationService(db).create_conversation(user.id, request.character_id, request.title)


@router.get("/conversations", response_model=List[ConversationResponse])
async def list_conversations(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List the caller's conversations."""
    return ConversationService(db).list_conversations(user.id)


@router.get("/conversations/{conversation_id}", response_model=ConversationResponse)
async def get_conversation(
    conversation_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get conversation details."""
    return ConversationService(db).get_conversation(user.id, conversation_id)


@router.delete("/conversations/{conversation_id}")
async def delete_conversation(
    conversation_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Delete a conversation and all its messages."""
    ConversationService(db).delete_conversation(user.id, conversation_id)
    return {"status": "deleted", "id": conversation_id}


# === Message Endpoints ===

@router.get("/conversations/{conversation_id}/messages", response_model=List[MessageResponse])
async def list_messages(
    conversation_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get all messages in a conversation."""
    return ConversationService(db).list_messages(user.id, conversation_id)


@router.post("/conversations/{conversation_id}/messages", response_model=ReplyResponse)
async def send_message(
    conversation_id: int,
    request: SendMessageRequest,
    user: User = Depends(get_current_user),
    orchestrator: ChatOrchestrator = Depends(get_chat_orchestrator)
):
    """Send a message and get the character's reply."""
    reply = await orchestrator.send_message(user.id, conversation_id, request.content)
    return ReplyResponse(content=reply)


# === Group Chat Endpoints ===

@router.post("/group-chats", response_model=GroupChatResponse)
async def create_group_chat(
    request: GroupChatCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Create a group chat with two or more characters."""
    return GroupChatService(db).create_group_chat(
        user_id=user.id,
        name=request.name,
        character_ids=request.character_ids,
        description=request.description,
        topic=request.topic
    )


@router.get("/group-chats", response_model=List[GroupChatResponse])
async def list_group_chats(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List the caller's group chats."""
    return GroupChatService(db).list_group_chats(user.id)


@router.get("/group-chats/{group_chat_id}", response_model=GroupChatDetailResponse)
async def get_group_chat(
    group_chat_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get a group chat with its participant characters."""
    service = GroupChatService(db)
    group_chat = service.get_group_chat(user.id, group_chat_id)
    characters = [c for c in service.get_participant_characters(group_chat.id) if c is not None]

    detail = GroupChatResponse.model_validate(group_chat).model_dump()
    detail["characters"] = [CharacterResponse.model_validate(c) for c in characters]
    return GroupChatDetailResponse(**detail)


@router.delete("/group-chats/{group_chat_id}")
async def delete_group_chat(
    group_chat_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Delete a group chat with its participants and messages."""
    GroupChatService(db).delete_group_chat(user.id, group_chat_id)
    return {"status": "deleted", "id": group_chat_id}


# === Group Message Endpoints ===

@router.get("/group-chats/{group_chat_id}/messages", response_model=List[GroupMessageResponse])
async def list_group_messages(
    group_chat_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get all messages in a group chat."""
    return GroupChatService(db).list_messages(user.id, group_chat_id)


@router.post("/group-chats/{group_chat_id}/messages", response_model=GroupMessageResponse)
async def send_group_message(
    group_chat_id: int,
    request: SendMessageRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Post a message as the human user (no reply is generated)."""
    return GroupChatService(db).send_message(user.id, group_chat_id, request.content)


@router.post("/group-chats/{group_chat_id}/responses", response_model=ReplyResponse)
async def generate_group_response(
    group_chat_id: int,
    request: GenerateResponseRequest,
    user: User = Depends(get_current_user),
    orchestrator: ChatOrchestrator = Depends(get_chat_orchestrator)
):
    """Have one character speak next in the group chat."""
    reply = await orchestrator.generate_group_response(user.id, group_chat_id, request.character_id)
    return ReplyResponse(content=reply)


# === Debug Endpoints ===

@router.get("/debug/conversations/{conversation_id}")
async def get_conversation_debug_log(
    conversation_id: int,
    http_request: Request,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get the logged LLM interactions for an owned conversation (debug mode only)."""
    ConversationService(db).get_conversation(user.id, conversation_id)
    debug_logger = http_request.app.state.debug_logger
    return {
        "conversation_id": conversation_id,
        "enabled": debug_logger.enabled,
        "interactions": debug_logger.get_log(f"conversation_{conversation_id}")
    }


@router.delete("/debug/conversations/{conversation_id}")
async def clear_conversation_debug_log(
    conversation_id: int,
    http_request: Request,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Delete the logged LLM interactions for an owned conversation."""
    ConversationService(db).get_conversation(user.id, conversation_id)
    http_request.app.state.debug_logger.clear_log(f"conversation_{conversation_id}")
    return {"status": "cleared", "conversation_id": conversation_id}


@router.get("/debug/group-chats/{group_chat_id}")
async def get_group_chat_debug_log(
    group_chat_id: int,
    http_request: Request,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get the logged LLM interactions for an owned group chat (debug mode only)."""
    GroupChatService(db).get_group_chat(user.id, group_chat_id)
    debug_logger = http_request.app.state.debug_logger
    return {
        "group_chat_id": group_chat_id,
        "enabled": debug_logger.enabled,
        "interactions": debug_logger.get_log(f"group_{group_chat_id}")
    }


@router.delete("/debug/group-chats/{group_chat_id}")
async def clear_group_chat_debug_log(
    group_chat_id: int,
    http_request: Request,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Delete the logged LLM interactions for an owned group chat."""
    GroupChatService(db).get_group_chat(user.id, group_chat_id)
    http_request.app.state.debug_logger.clear_log(f"group_{group_chat_id}")
    return {"status": "cleared", "group_chat_id": group_chat_id}
