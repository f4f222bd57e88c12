"""
File-backed session store for TripSplit.

Each session is one JSON snapshot named by a UUID. A save replaces the whole
snapshot at once; concurrent writers are last-write-wins.
"""
from __future__ import annotations
import json
import logging
import os
import tempfile
import uuid
from typing import List, Optional

from config import dict_to_session, session_to_dict
from models import Session
from utils import app_dir

logger = logging.getLogger(__name__)

SESSIONS_DIR = "sessions"


class SessionStoreError(Exception):
    """Storage failure or bad session id"""


class SessionNotFoundError(SessionStoreError):
    """No session with this id"""


def default_store_dir() -> str:
    return os.path.join(app_dir(), SESSIONS_DIR)


class SessionStore:
    """Directory of <uuid>.json session snapshots"""

    def __init__(self, base_dir: Optional[str] = None):
        self.base_dir = base_dir or default_store_dir()
        os.makedirs(self.base_dir, exist_ok=True)

    def _path(self, session_id: str) -> str:
        try:
            canonical = str(uuid.UUID(str(session_id)))
        except ValueError:
            raise SessionStoreError(f"Invalid session id: {session_id!r}") from None
        return os.path.join(self.base_dir, f"{canonical}.json")

    def _write(self, path: str, session: Session) -> None:
        """Write to a temp file beside the target, then swap it in"""
        fd, tmp = tempfile.mkstemp(dir=self.base_dir, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(session_to_dict(session), f, ensure_ascii=False, indent=2)
            os.replace(tmp, path)
        except BaseException:
            if os.path.exists(tmp):
                os.remove(tmp)
            raise

    def exists(self, session_id: str) -> bool:
        return os.path.exists(self._path(session_id))

    def create_session(self) -> str:
        """Create an empty session and return its id"""
        session_id = str(uuid.uuid4())
        self._write(self._path(session_id), Session())
        logger.info("Created session %s", session_id)
        return session_id

    def save_session(self, session_id: str, session: Session) -> None:
        """Replace the stored snapshot of an existing session"""
        path = self._path(session_id)
        if not os.path.exists(path):
            raise SessionNotFoundError(f"Session not found: {session_id}")
        self._write(path, session)
        logger.info("Saved session %s (%d members, %d expenses)",
                    session_id, len(session.members), len(session.expenses))

    def load_session(self, session_id: str) -> Optional[Session]:
        """Load a session, or None when it does not exist"""
        path = self._path(session_id)
        try:
            with open(path, "r", encoding="utf-8") as f:
                d = json.load(f)
        except FileNotFoundError:
            logger.warning("Session %s not found", session_id)
            return None
        return dict_to_session(d)

    def delete_session(self, session_id: str) -> None:
        path = self._path(session_id)
        try:
            os.remove(path)
        except FileNotFoundError:
            raise SessionNotFoundError(f"Session not found: {session_id}") from None
        logger.info("Deleted session %s", session_id)

    def list_sessions(self) -> List[str]:
        """Session ids, most recently saved first"""
        entries = []
        for name in os.listdir(self.base_dir):
            stem, ext = os.path.splitext(name)
            if ext != ".json":
                continue
            try:
                uuid.UUID(stem)
            except ValueError:
                continue
            entries.append((os.path.getmtime(os.path.join(self.base_dir, name)), stem))
        entries.sort(reverse=True)
        return [stem for _, stem in entries]
