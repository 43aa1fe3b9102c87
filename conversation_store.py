"""
Persistence of the conversation identifier between runs.

A single key/value table in SQLite holds the current conversation id; the
value is created on first use and reused until it is cleared.
"""

import logging
import sqlite3
import uuid
from typing import Optional

import config
from validation import is_valid_uuid

logger = logging.getLogger('chart_assistant.conversation_store')

CONVERSATION_ID_KEY = 'chatbot_conversation_id'


class ConversationStore:
    """Get-or-create and clear for the conversation id."""

    def __init__(self, db_path: str = config.conversation_db_path):
        self.db_path = db_path
        self._ensure_schema()

    def _ensure_schema(self):
        try:
            with sqlite3.connect(self.db_path) as conn:
                conn.execute(
                    """
                    CREATE TABLE IF NOT EXISTS session_state (
                        key TEXT PRIMARY KEY,
                        value TEXT NOT NULL,
                        updated_at DATETIME DEFAULT CURRENT_TIMESTAMP
                    )
                """
                )
                conn.commit()
        except sqlite3.Error as e:
            logger.error(f"Error initializing conversation store schema: {e}")
            raise

    def _read(self) -> Optional[str]:
        with sqlite3.connect(self.db_path) as conn:
            row = conn.execute(
                "SELECT value FROM session_state WHERE key = ?", (CONVERSATION_ID_KEY,)
            ).fetchone()
        return row[0] if row else None

    def _write(self, value: str):
        with sqlite3.connect(self.db_path) as conn:
            conn.execute(
                """
                INSERT INTO session_state (key, value, updated_at)
                VALUES (?, ?, CURRENT_TIMESTAMP)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = CURRENT_TIMESTAMP
            """,
                (CONVERSATION_ID_KEY, value),
            )
            conn.commit()

    def get_or_create_conversation_id(self) -> str:
        """
        Return the stored conversation id, creating a new UUID4 if needed.

        A stored value that is not a UUID is replaced.
        """
        stored = self._read()
        if stored and is_valid_uuid(stored):
            return stored

        if stored:
            logger.warning("Stored conversation id is malformed, generating a new one")

        new_id = str(uuid.uuid4())
        self._write(new_id)
        logger.info(f"Started conversation {new_id}")
        return new_id

    def clear_conversation_id(self):
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("DELETE FROM session_state WHERE key = ?", (CONVERSATION_ID_KEY,))
            conn.commit()
        logger.info("Conversation id cleared")
