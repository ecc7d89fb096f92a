# estate_portal/core/sessions.py
"""
Server-side sessions.

Two layers:

  - SessionStore: where whole session records live (in-process dict or the
    `web_sessions` table). Records expire after a period of inactivity.
  - SessionHandle: one client's session as seen by a single request. Reads
    are served from the record loaded on first use; writes are buffered and
    persisted together by flush(), so a multi-key update is never half
    written.

Store failures raise SessionStoreError. An expired or unknown session id is
not an error: it loads as None and the handle starts a fresh, empty session.
"""
import copy
import logging
import secrets
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session as DBSession, select
from starlette.concurrency import run_in_threadpool

from estate_portal.models.web_session import WebSession

logger = logging.getLogger(__name__)


class SessionStoreError(Exception):
    """The session store is unreachable or returned unusable data."""


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_session_id() -> str:
    return secrets.token_urlsafe(32)


@dataclass
class SessionRecord:
    id: str
    data: dict[str, Any] = field(default_factory=dict)
    expires_at: datetime = field(default_factory=utcnow)

    def is_expired(self, now: datetime | None = None) -> bool:
        return self.expires_at <= (now or utcnow())


class SessionStore(ABC):
    """
    Async storage contract for session records.

    Implementations must return None from load() for a missing or expired
    record and raise SessionStoreError for anything else that goes wrong.
    """

    @abstractmethod
    async def load(self, session_id: str) -> SessionRecord | None: ...

    @abstractmethod
    async def save(self, record: SessionRecord) -> None:
        """Insert or fully replace a record."""

    @abstractmethod
    async def delete(self, session_id: str) -> None: ...

    @abstractmethod
    async def touch(self, session_id: str, expires_at: datetime) -> bool:
        """Move a live record's expiry. Returns False if there is no such record."""

    @abstractmethod
    async def delete_expired(self) -> int:
        """Drop every expired record and return how many were removed."""


class MemorySessionStore(SessionStore):
    """
    Process-local store.

    Only suitable for a single worker (and tests): sessions vanish on restart.
    Records are copied in and out so callers never share a dict with the store.
    """

    def __init__(self) -> None:
        self._records: dict[str, SessionRecord] = {}

    def __len__(self) -> int:
        return len(self._records)

    async def load(self, session_id: str) -> SessionRecord | None:
        record = self._records.get(session_id)
        if record is None:
            return None
        if record.is_expired():
            del self._records[session_id]
            return None
        return SessionRecord(record.id, copy.deepcopy(record.data), record.expires_at)

    async def save(self, record: SessionRecord) -> None:
        self._records[record.id] = SessionRecord(
            record.id, copy.deepcopy(record.data), record.expires_at
        )

    async def delete(self, session_id: str) -> None:
        self._records.pop(session_id, None)

    async def touch(self, session_id: str, expires_at: datetime) -> bool:
        record = self._records.get(session_id)
        if record is None or record.is_expired():
            return False
        record.expires_at = expires_at
        return True

    async def delete_expired(self) -> int:
        now = utcnow()
        expired = [sid for sid, rec in self._records.items() if rec.is_expired(now)]
        for sid in expired:
            del self._records[sid]
        return len(expired)


def _to_db_time(value: datetime) -> datetime:
    # web_sessions.expires_at is naive UTC
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def _from_db_time(value: datetime) -> datetime:
    return value.replace(tzinfo=timezone.utc)


class DatabaseSessionStore(SessionStore):
    """
    Store backed by the `web_sessions` table.

    The engine is synchronous (same engine as the rest of the app), so every
    call runs in Starlette's threadpool.
    """

    def __init__(self, engine: Engine):
        self.engine = engine

    async def load(self, session_id: str) -> SessionRecord | None:
        return await run_in_threadpool(self._load, session_id)

    async def save(self, record: SessionRecord) -> None:
        await run_in_threadpool(self._save, record)

    async def delete(self, session_id: str) -> None:
        await run_in_threadpool(self._delete, session_id)

    async def touch(self, session_id: str, expires_at: datetime) -> bool:
        return await run_in_threadpool(self._touch, session_id, expires_at)

    async def delete_expired(self) -> int:
        return await run_in_threadpool(self._delete_expired)

    # ----- Sync implementations -----

    def _load(self, session_id: str) -> SessionRecord | None:
        try:
            with DBSession(self.engine) as db:
                row = db.get(WebSession, session_id)
                if row is None:
                    return None
                expires_at = _from_db_time(row.expires_at)
                if expires_at <= utcnow():
                    db.delete(row)
                    db.commit()
                    return None
                data = row.data
        except SQLAlchemyError as exc:
            raise SessionStoreError(f"could not load session: {exc}") from exc

        if not isinstance(data, dict):
            raise SessionStoreError("session record is not a JSON object")
        return SessionRecord(session_id, copy.deepcopy(data), expires_at)

    def _save(self, record: SessionRecord) -> None:
        try:
            with DBSession(self.engine) as db:
                row = db.get(WebSession, record.id)
                if row is None:
                    row = WebSession(id=record.id)
                row.data = copy.deepcopy(record.data)
                row.expires_at = _to_db_time(record.expires_at)
                db.add(row)
                db.commit()
        except SQLAlchemyError as exc:
            raise SessionStoreError(f"could not save session: {exc}") from exc

    def _delete(self, session_id: str) -> None:
        try:
            with DBSession(self.engine) as db:
                row = db.get(WebSession, session_id)
                if row is not None:
                    db.delete(row)
                    db.commit()
        except SQLAlchemyError as exc:
            raise SessionStoreError(f"could not delete session: {exc}") from exc

    def _touch(self, session_id: str, expires_at: datetime) -> bool:
        try:
            with DBSession(self.engine) as db:
                row = db.get(WebSession, session_id)
                if row is None or _from_db_time(row.expires_at) <= utcnow():
                    return False
                row.expires_at = _to_db_time(expires_at)
                db.add(row)
                db.commit()
                return True
        except SQLAlchemyError as exc:
            raise SessionStoreError(f"could not touch session: {exc}") from exc

    def _delete_expired(self) -> int:
        try:
            with DBSession(self.engine) as db:
                now = _to_db_time(utcnow())
                rows = db.exec(
                    select(WebSession).where(WebSession.expires_at <= now)
                ).all()
                for row in rows:
                    db.delete(row)
                db.commit()
                return len(rows)
        except SQLAlchemyError as exc:
            raise SessionStoreError(f"could not delete expired sessions: {exc}") from exc


class SessionHandle:
    """
    A client's session for the duration of one request.

    Usage:

        user_id = await session.get("user_id")
        await session.set("user_id", "...")
        await session.set("user_level", "Admin")
        await session.flush()   # both keys land in the store together

    The record is loaded lazily on first access. An id that the store does
    not know (expired, deleted, forged) is dropped; the next flush() mints a
    new one.
    """

    def __init__(self, store: SessionStore, session_id: str | None, ttl_seconds: int):
        self.store = store
        self._id = session_id
        self._ttl = timedelta(seconds=ttl_seconds)
        self._data: dict[str, Any] | None = None
        self._exists = False
        self._modified = False
        self._saved = False
        self._stale_ids: list[str] = []

    @property
    def id(self) -> str | None:
        return self._id

    @property
    def modified(self) -> bool:
        return self._modified

    @property
    def saved(self) -> bool:
        """True once this request has written the record to the store."""
        return self._saved

    @property
    def loaded(self) -> bool:
        return self._data is not None

    def expiry(self) -> datetime:
        return utcnow() + self._ttl

    async def _load(self) -> dict[str, Any]:
        if self._data is None:
            record = await self.store.load(self._id) if self._id else None
            if record is None:
                self._data = {}
                self._exists = False
                self._id = None
            else:
                self._data = record.data
                self._exists = True
        return self._data

    async def get(self, key: str, default: Any = None) -> Any:
        data = await self._load()
        return data.get(key, default)

    async def set(self, key: str, value: Any) -> None:
        data = await self._load()
        data[key] = value
        self._modified = True

    async def remove(self, key: str) -> Any:
        data = await self._load()
        if key not in data:
            return None
        self._modified = True
        return data.pop(key)

    async def cycle_id(self) -> None:
        """Keep the data, but move it to a fresh id on the next flush()."""
        await self._load()
        if self._id is not None and self._exists:
            self._stale_ids.append(self._id)
        self._id = None
        self._modified = True

    async def flush(self) -> None:
        """Persist the current data (and any id change) to the store now."""
        data = await self._load()
        for stale_id in self._stale_ids:
            await self.store.delete(stale_id)
        self._stale_ids.clear()

        if self._id is None:
            self._id = new_session_id()
        await self.store.save(SessionRecord(self._id, dict(data), self.expiry()))
        self._exists = True
        self._modified = False
        self._saved = True

    async def touch(self) -> bool:
        """Slide the expiry of an existing record without rewriting its data."""
        if self._id is None or (self.loaded and not self._exists):
            return False
        touched = await self.store.touch(self._id, self.expiry())
        if not touched:
            self._id = None
        return touched
