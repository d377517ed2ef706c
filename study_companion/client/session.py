"""Login session held by the client, optionally mirrored to durable storage."""

from __future__ import annotations

import enum
import json
import logging
from dataclasses import dataclass
from typing import Dict, Optional

from study_companion.models import User

logger = logging.getLogger(__name__)

AUTH_TOKEN_KEY = 'authToken'
CURRENT_USER_KEY = 'currentUser'


class SessionState(enum.Enum):
    LOGGED_OUT = 'logged_out'
    PERSISTED = 'persisted'
    EPHEMERAL = 'ephemeral'


@dataclass(frozen=True)
class Session:
    user: Optional[User]
    auth_token: Optional[str]
    persist: bool


LOGGED_OUT = Session(user=None, auth_token=None, persist=False)


class SessionManager:
    """Owns the in-memory session.

    Durable storage is read once, here, to seed the session; afterwards it is
    only written by ``begin`` and ``clear``.
    """

    def __init__(self, storage):
        self._storage = storage
        self._session = LOGGED_OUT
        self._restore()

    def _restore(self):
        token = self._storage.get(AUTH_TOKEN_KEY)
        raw_user = self._storage.get(CURRENT_USER_KEY)
        user = None
        if raw_user:
            try:
                data = json.loads(raw_user)
            except ValueError:
                logger.warning("Ignoring unreadable stored user")
                data = None
            if isinstance(data, dict) and data.get('email'):
                user = User.from_dict(data)
        if token or user:
            self._session = Session(user=user, auth_token=token or None, persist=True)

    @property
    def session(self) -> Session:
        return self._session

    @property
    def state(self) -> SessionState:
        if self._session.user is None and not self._session.auth_token:
            return SessionState.LOGGED_OUT
        return SessionState.PERSISTED if self._session.persist else SessionState.EPHEMERAL

    def begin(self, token: Optional[str], user: Optional[User], remember: bool) -> Session:
        self._session = Session(user=user, auth_token=token or None, persist=bool(remember))
        if remember:
            if token:
                self._storage.set(AUTH_TOKEN_KEY, token)
            if user is not None:
                self._storage.set(CURRENT_USER_KEY, json.dumps(user.to_dict()))
        else:
            # An older remembered login must not come back after a restart.
            self._remove_durable_copy()
        return self._session

    def clear(self) -> None:
        self._session = LOGGED_OUT
        self._remove_durable_copy()

    def _remove_durable_copy(self):
        self._storage.remove(CURRENT_USER_KEY)
        self._storage.remove(AUTH_TOKEN_KEY)

    def auth_headers(self) -> Dict[str, str]:
        token = self._session.auth_token
        return {'Authorization': f'Bearer {token}'} if token else {}
