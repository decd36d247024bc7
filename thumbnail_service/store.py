"""
Assistant storage module with MongoDB and SQLite backends.

Provides read access to:
- Assistant documents (name, description, creator name) keyed by ObjectId
- Avatar blobs stored under a filename equal to the assistant id
"""

import logging
import os
import sqlite3
from dataclasses import dataclass
from typing import Any, Dict, Optional

from bson import ObjectId
from bson.errors import InvalidId
from fastapi.concurrency import run_in_threadpool
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorGridFSBucket
from pymongo.errors import PyMongoError

from .config import settings
from .errors import AssistantNotFound, AvatarTooLarge, StoreError, UpstreamIOError

logger = logging.getLogger("thumbnail.store")


@dataclass(frozen=True)
class AssistantRecord:
    """
    Assistant fields needed to draw a thumbnail.

    Attributes:
        id: ObjectId hex string; also the avatar blob filename
        name: Display name
        description: Free-form description
        created_by_name: Display name of the creator ("" when unknown)
    """
    id: str
    name: str
    description: str
    created_by_name: str

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "AssistantRecord":
        """Create an AssistantRecord from a Mongo-shaped document."""
        return cls(
            id=str(doc["_id"]),
            name=doc.get("name") or "",
            description=doc.get("description") or "",
            created_by_name=doc.get("createdByName") or "",
        )


def parse_assistant_id(raw: str) -> ObjectId:
    """
    Parse a path-supplied identifier into an ObjectId.

    Raises:
        AssistantNotFound: If the identifier is not a valid ObjectId
    """
    try:
        return ObjectId(raw)
    except (InvalidId, TypeError) as e:
        raise AssistantNotFound(raw) from e


class BaseStore:
    """Abstract base class for assistant storage backends."""

    name = "base"

    async def find_assistant(self, key: ObjectId) -> Optional[AssistantRecord]:
        """
        Look up one assistant.

        Args:
            key: Parsed assistant id

        Returns:
            AssistantRecord, or None if no document matches
        """
        raise NotImplementedError

    async def find_avatar(self, filename: str, max_bytes: Optional[int] = None) -> Optional[bytes]:
        """
        Read the avatar blob stored under filename.

        Args:
            filename: Blob filename (the assistant id as a hex string)
            max_bytes: Refuse blobs larger than this without reading them

        Returns:
            Raw image bytes, or None if no blob exists

        Raises:
            AvatarTooLarge: The stored blob is larger than max_bytes
        """
        raise NotImplementedError

    async def health_check(self) -> bool:
        """Return True if the backend is reachable."""
        raise NotImplementedError

    def close(self) -> None:
        """Release client resources."""


class MongoStore(BaseStore):
    """
    MongoDB storage: assistants collection plus a GridFS bucket for avatars.
    """

    name = "mongo"

    def __init__(
        self,
        url: str,
        db_name: str,
        collection: str = "assistants",
        bucket: str = "assistants",
        timeout_ms: int = 5000,
    ):
        self.client = AsyncIOMotorClient(url, serverSelectionTimeoutMS=timeout_ms)
        self.db = self.client[db_name]
        self.assistants = self.db[collection]
        self.bucket = AsyncIOMotorGridFSBucket(self.db, bucket_name=bucket)

    async def find_assistant(self, key: ObjectId) -> Optional[AssistantRecord]:
        try:
            doc = await self.assistants.find_one(
                {"_id": key},
                projection={"name": 1, "description": 1, "createdByName": 1},
            )
        except PyMongoError as e:
            raise StoreError(f"Assistant lookup failed: {e}") from e
        if doc is None:
            return None
        return AssistantRecord.from_document(doc)

    async def find_avatar(self, filename: str, max_bytes: Optional[int] = None) -> Optional[bytes]:
        try:
            files = await self.bucket.find({"filename": filename}, limit=1).to_list(length=1)
        except PyMongoError as e:
            raise StoreError(f"Avatar lookup failed: {e}") from e
        if not files:
            return None
        if max_bytes is not None and files[0].length > max_bytes:
            raise AvatarTooLarge(filename, files[0].length, max_bytes)

        try:
            stream = await self.bucket.open_download_stream(files[0]._id)
            return await stream.read()
        except PyMongoError as e:
            raise UpstreamIOError(f"Avatar download failed for {filename}: {e}") from e

    async def health_check(self) -> bool:
        try:
            await self.client.admin.command("ping")
            return True
        except PyMongoError:
            return False

    def close(self) -> None:
        self.client.close()


class SQLiteStore(BaseStore):
    """
    SQLite-based assistant storage.

    Suitable for local development and tests. Mirrors the Mongo layout with
    an ``assistants`` table and an ``avatars`` table keyed by filename.
    """

    name = "sqlite"

    def __init__(self, path: str):
        """
        Initialize SQLite store.

        Args:
            path: Path to SQLite database file
        """
        self.path = path
        self._ensure_directory()
        self._init_db()

    def _ensure_directory(self) -> None:
        """Create parent directory if it doesn't exist."""
        dir_path = os.path.dirname(self.path)
        if dir_path and not os.path.exists(dir_path):
            os.makedirs(dir_path, exist_ok=True)

    def _conn(self) -> sqlite3.Connection:
        """Create a new database connection."""
        return sqlite3.connect(self.path, check_same_thread=False)

    def _init_db(self) -> None:
        """Create schema if not exists."""
        con = self._conn()
        try:
            con.execute(
                """
                CREATE TABLE IF NOT EXISTS assistants (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL DEFAULT '',
                    description TEXT NOT NULL DEFAULT '',
                    created_by_name TEXT NOT NULL DEFAULT ''
                )
                """
            )
            con.execute(
                """
                CREATE TABLE IF NOT EXISTS avatars (
                    filename TEXT PRIMARY KEY,
                    data BLOB NOT NULL
                )
                """
            )
            con.commit()
        finally:
            con.close()

    def _get_assistant(self, key: str) -> Optional[AssistantRecord]:
        try:
            con = self._conn()
            try:
                row = con.execute(
                    "SELECT name, description, created_by_name FROM assistants WHERE id=?",
                    (key,),
                ).fetchone()
            finally:
                con.close()
        except sqlite3.Error as e:
            raise StoreError(f"Assistant lookup failed: {e}") from e

        if not row:
            return None
        name, description, created_by_name = row
        return AssistantRecord(key, name or "", description or "", created_by_name or "")

    def _get_avatar(self, filename: str, max_bytes: Optional[int]) -> Optional[bytes]:
        try:
            con = self._conn()
            try:
                row = con.execute(
                    "SELECT length(data) FROM avatars WHERE filename=?", (filename,)
                ).fetchone()
                if not row:
                    return None
                if max_bytes is not None and row[0] > max_bytes:
                    raise AvatarTooLarge(filename, row[0], max_bytes)
                row = con.execute(
                    "SELECT data FROM avatars WHERE filename=?", (filename,)
                ).fetchone()
            finally:
                con.close()
        except sqlite3.Error as e:
            raise UpstreamIOError(f"Avatar read failed for {filename}: {e}") from e
        return bytes(row[0]) if row else None

    async def find_assistant(self, key: ObjectId) -> Optional[AssistantRecord]:
        return await run_in_threadpool(self._get_assistant, str(key))

    async def find_avatar(self, filename: str, max_bytes: Optional[int] = None) -> Optional[bytes]:
        return await run_in_threadpool(self._get_avatar, filename, max_bytes)

    async def health_check(self) -> bool:
        try:
            con = self._conn()
            try:
                con.execute("SELECT 1").fetchone()
            finally:
                con.close()
            return True
        except sqlite3.Error:
            return False

    def save_assistant(self, record: AssistantRecord) -> None:
        """Insert or replace an assistant row (local development seeding)."""
        con = self._conn()
        try:
            con.execute(
                """
                INSERT INTO assistants (id, name, description, created_by_name)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    name=excluded.name,
                    description=excluded.description,
                    created_by_name=excluded.created_by_name
                """,
                (record.id, record.name, record.description, record.created_by_name),
            )
            con.commit()
        finally:
            con.close()

    def save_avatar(self, filename: str, data: bytes) -> None:
        """Insert or replace an avatar blob (local development seeding)."""
        con = self._conn()
        try:
            con.execute(
                "INSERT OR REPLACE INTO avatars (filename, data) VALUES (?, ?)",
                (filename, sqlite3.Binary(data)),
            )
            con.commit()
        finally:
            con.close()


def get_store() -> BaseStore:
    """
    Factory function to get the configured storage backend.

    Returns:
        MongoStore or SQLiteStore based on STORE setting
    """
    if settings.STORE.lower() == "sqlite":
        return SQLiteStore(settings.SQLITE_PATH)
    logger.info("Using MongoDB store db=%s", settings.MONGODB_DB_NAME)
    return MongoStore(
        settings.MONGODB_URL,
        settings.MONGODB_DB_NAME,
        collection=settings.ASSISTANTS_COLLECTION,
        bucket=settings.AVATAR_BUCKET,
        timeout_ms=settings.MONGODB_TIMEOUT_MS,
    )
