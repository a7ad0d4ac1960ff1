"""
Debug logging utility for LLM interactions.
Logs every message list sent to the LLM with its reply, for debugging.
"""
import json
import logging
import shutil
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


class DebugLogger:
    """Logs LLM interactions to chat-specific JSONL files."""

    def __init__(self, debug_dir: Optional[Path] = None, enabled: bool = True):
        """Initialize debug logger.

        Args:
            debug_dir: Directory for debug logs. Defaults to data/debug_logs/conversations/
            enabled: Whether debug logging is enabled (from system config)
        """
        if debug_dir is None:
            debug_dir = Path("data/debug_logs/conversations")

        self.debug_dir = Path(debug_dir)
        self.enabled = enabled

        if self.enabled:
            self.debug_dir.mkdir(parents=True, exist_ok=True)
            logger.info(f"Debug logger initialized: {self.debug_dir}")
        else:
            logger.info("Debug logging disabled (debug mode off in system config)")

    def log_llm_interaction(
        self,
        log_key: str,
        interaction_type: str,
        model: Optional[str],
        messages: List[Dict[str, str]],
        response: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
        error: Optional[str] = None
    ):
        """Log an LLM interaction with full context.

        Args:
            log_key: Directory name for the chat (e.g. 'conversation_12', 'group_3')
            interaction_type: Type of interaction (chat, group_chat)
            model: Model name used, if known
            messages: Full message list sent to the LLM
            response: LLM reply text (if available)
            metadata: Additional metadata (character_id, knowledge matches, etc.)
            error: Error message if interaction failed
        """
        if not self.enabled:
            return

        try:
            chat_dir = self.debug_dir / log_key
            chat_dir.mkdir(parents=True, exist_ok=True)
            log_file = chat_dir / "conversation.jsonl"

            interaction = {
                "timestamp": datetime.now().isoformat(),
                "type": interaction_type,
                "model": model,
                "messages": messages,
                "response": response,
                "metadata": metadata or {},
                "error": error
            }

            # Append to JSONL file (one JSON object per line)
            with open(log_file, "a", encoding="utf-8") as f:
                f.write(json.dumps(interaction, ensure_ascii=False, default=str) + "\n")

            logger.debug(
                f"[DEBUG LOG] {interaction_type} | model={model} | "
                f"chat={log_key} | messages={len(messages)}"
            )

        except OSError as e:
            logger.error(f"Failed to write debug log: {e}", exc_info=True)

    def get_log(self, log_key: str) -> List[Dict[str, Any]]:
        """Read all logged interactions for a chat.

        Args:
            log_key: Directory name for the chat

        Returns:
            List of interaction records
        """
        log_file = self.debug_dir / log_key / "conversation.jsonl"
        if not log_file.exists():
            return []

        interactions = []
        with open(log_file, "r", encoding="utf-8") as f:
            for line in f:
                if line.strip():
                    interactions.append(json.loads(line))

        return interactions

    def clear_log(self, log_key: str):
        """Delete the debug log directory for a chat.

        Args:
            log_key: Directory name for the chat
        """
        chat_dir = self.debug_dir / log_key
        if chat_dir.exists():
            shutil.rmtree(chat_dir)
            logger.info(f"Cleared debug logs for {log_key}")
