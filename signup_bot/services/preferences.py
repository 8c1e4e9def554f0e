from __future__ import annotations

"""Durable per-chat key-value preferences."""
import json
import sqlite3
from pathlib import Path
from typing import Any

import aiosqlite

from ..models.session_preferences import KEY_IS_SIGNED_IN, SessionPreferences
from ..models.user_record import KEY_FIRST_NAME, KEY_IMAGE, KEY_LAST_NAME


class PreferenceStore:
    def __init__(self, db_path: Path) -> None:
        self._db_path = db_path
        self._db_path.parent.mkdir(parents=True, exist_ok=True)

    async def _connect(self) -> aiosqlite.Connection:
        conn = await aiosqlite.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    async def init_schema(self) -> None:
        conn = await self._connect()
        try:
            await conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS preferences (
                    scope INTEGER NOT NULL,
                    key TEXT NOT NULL,
                    value TEXT NOT NULL,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    PRIMARY KEY (scope, key)
                );
                """
            )
            await conn.commit()
        finally:
            await conn.close()

    def for_chat(self, chat_id: int) -> "ChatPreferences":
        return ChatPreferences(self, chat_id)

    async def put(self, scope: int, key: str, value: Any) -> None:
        conn = await self._connect()
        try:
            await conn.execute(
                """
                INSERT INTO preferences (scope, key, value) VALUES (?, ?, ?)
                ON CONFLICT(scope, key) DO UPDATE SET
                    value=excluded.value,
                    updated_at=CURRENT_TIMESTAMP
                """,
                (scope, key, json.dumps(value)),
            )
            await conn.commit()
        finally:
            await conn.close()

    async def get(self, scope: int, key: str, default: Any = None) -> Any:
        conn = await self._connect()
        try:
            cursor = await conn.execute("SELECT value FROM preferences WHERE scope=? AND key=?", (scope, key))
            row = await cursor.fetchone()
        finally:
            await conn.close()
        if row is None:
            return default
        return json.loads(row["value"])

    async def clear(self, scope: int) -> None:
        conn = await self._connect()
        try:
            await conn.execute("DELETE FROM preferences WHERE scope=?", (scope,))
            await conn.commit()
        finally:
            await conn.close()


class ChatPreferences:
    """Preference view bound to a single chat."""

    def __init__(self, store: PreferenceStore, chat_id: int) -> None:
        self._store = store
        self._chat_id = chat_id

    async def put_bool(self, key: str, value: bool) -> None:
        await self._store.put(self._chat_id, key, bool(value))

    async def put_string(self, key: str, value: str) -> None:
        await self._store.put(self._chat_id, key, str(value))

    async def get_bool(self, key: str, default: bool = False) -> bool:
        return bool(await self._store.get(self._chat_id, key, default))

    async def get_string(self, key: str, default: str = "") -> str:
        return str(await self._store.get(self._chat_id, key, default))

    async def clear(self) -> None:
        await self._store.clear(self._chat_id)

    async def load_session(self) -> SessionPreferences:
        return SessionPreferences(
            is_signed_in=await self.get_bool(KEY_IS_SIGNED_IN),
            first_name=await self.get_string(KEY_FIRST_NAME),
            last_name=await self.get_string(KEY_LAST_NAME),
            encoded_image=await self.get_string(KEY_IMAGE),
        )
