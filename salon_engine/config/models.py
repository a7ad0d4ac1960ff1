"""Pydantic models for configuration validation."""

from typing import Optional, Literal, List
from pydantic import BaseModel, Field, field_validator, ConfigDict


class LLMConfig(BaseModel):
    """LLM backend configuration."""

    provider: Literal["openai-compatible", "ollama"] = "openai-compatible"
    base_url: str = "http://localhost:1234"
    model: str = "gpt-4o-mini"
    api_key: Optional[str] = Field(default=None, description="Bearer token for hosted APIs")
    max_response_tokens: int = Field(default=2048, gt=0, le=32768)
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    timeout_seconds: int = Field(default=120, gt=0)

    @field_validator('base_url')
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Ensure URL is properly formatted."""
        if not v.startswith(('http://', 'https://')):
            raise ValueError('base_url must start with http:// or https://')
        return v.rstrip('/')


class DatabaseConfig(BaseModel):
    """Relational store configuration."""

    url: str = "sqlite:///data/salon.db"
    echo: bool = Field(default=False, description="Log every SQL statement")


class ChatConfig(BaseModel):
    """Prompt assembly settings."""

    group_history_window: int = Field(
        default=10,
        gt=0,
        description="Most recent group messages sent to the LLM"
    )
    group_retrieval_window: int = Field(
        default=5,
        gt=0,
        description="Most recent group messages used as the knowledge query"
    )
    reply_fallback: str = "I'm sorry, I couldn't generate a response."
    group_reply_fallback: str = "I have nothing to add at this moment."


class SystemConfig(BaseModel):
    """Top-level system configuration."""

    model_config = ConfigDict(extra='ignore')

    llm: LLMConfig = Field(default_factory=LLMConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    chat: ChatConfig = Field(default_factory=ChatConfig)
    debug: bool = False
    api_host: str = "localhost"
    api_port: int = Field(default=8080, gt=0, le=65535)
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])
    user_header: str = Field(
        default="X-User-Id",
        description="Request header carrying the caller's identity"
    )
