from __future__ import annotations

"""Document collections persisted with aiosqlite."""
import json
import logging
import secrets
import sqlite3
import string
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Mapping, Optional

import aiosqlite

LOGGER = logging.getLogger(__name__)

_ID_ALPHABET = string.ascii_letters + string.digits
DOCUMENT_ID_LENGTH = 20


class DocumentStoreError(Exception):
    """Raised when a document cannot be written or read."""


@dataclass(frozen=True)
class DocumentRef:
    collection: str
    document_id: str

    @property
    def path(self) -> str:
        return f"{self.collection}/{self.document_id}"


def new_document_id() -> str:
    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(DOCUMENT_ID_LENGTH))


class DocumentStore:
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
                CREATE TABLE IF NOT EXISTS documents (
                    collection TEXT NOT NULL,
                    document_id TEXT NOT NULL,
                    payload TEXT NOT NULL,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    PRIMARY KEY (collection, document_id)
                );
                """
            )
            await conn.commit()
        finally:
            await conn.close()

    async def add_document(self, collection: str, fields: Mapping[str, str]) -> DocumentRef:
        ref = DocumentRef(collection=collection, document_id=new_document_id())
        try:
            conn = await self._connect()
            try:
                await conn.execute(
                    "INSERT INTO documents (collection, document_id, payload) VALUES (?, ?, ?)",
                    (ref.collection, ref.document_id, json.dumps(dict(fields))),
                )
                await conn.commit()
            finally:
                await conn.close()
        except aiosqlite.Error as exc:
            LOGGER.error("Failed to add document to %s: %s", collection, exc)
            raise DocumentStoreError(str(exc)) from exc
        LOGGER.info("Added document %s", ref.path)
        return ref

    async def get_document(self, ref: DocumentRef) -> Optional[Dict[str, str]]:
        conn = await self._connect()
        try:
            cursor = await conn.execute(
                "SELECT payload FROM documents WHERE collection=? AND document_id=?",
                (ref.collection, ref.document_id),
            )
            row = await cursor.fetchone()
        finally:
            await conn.close()
        if row is None:
            return None
        return json.loads(row["payload"])

    async def list_documents(self, collection: str) -> List[DocumentRef]:
        conn = await self._connect()
        try:
            cursor = await conn.execute(
                "SELECT document_id FROM documents WHERE collection=? ORDER BY created_at",
                (collection,),
            )
            rows = await cursor.fetchall()
        finally:
            await conn.close()
        return [DocumentRef(collection=collection, document_id=row["document_id"]) for row in rows]
