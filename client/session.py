import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional
from urllib.parse import quote

logger = logging.getLogger(__name__)

TOKEN_KEY = "token"
USER_ID_KEY = "userId"
CURRENT_USER_KEY = "currentUser"


class LocalStorage:
    """
    Small persistent key/value store backed by a JSON file

    Values are JSON-encodable. Every write rewrites the file.
    """

    def __init__(self, path):
        self.path = Path(path).expanduser()

    def _read(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            logger.warning("Ignoring unreadable storage file %s", self.path)
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")

    def get(self, key: str, default: Any = None) -> Any:
        return self._read().get(key, default)

    def set(self, key: str, value: Any) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()


def avatar_url(name: str) -> str:
    return f"https://ui-avatars.com/api/?name={quote(name or 'User')}&background=random"


@dataclass
class SessionContext:
    """Token plus cached profile of the signed-in user"""
    token: Optional[str] = None
    user_id: Optional[str] = None
    user: dict = field(default_factory=dict)

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    @property
    def display_name(self) -> str:
        return self.user.get("name") or "User"

    def auth_headers(self) -> dict:
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}

    def sign_in(self, token: str, user: dict) -> None:
        """Adopt a token and profile returned by the server"""
        profile = dict(user)
        profile.setdefault("name", "User")
        profile["avatar"] = avatar_url(profile["name"])
        self.token = token
        self.user_id = user.get("id")
        self.user = profile

    @classmethod
    def load(cls, storage: LocalStorage) -> "SessionContext":
        """Restore whatever a previous run saved; empty session if nothing"""
        return cls(
            token=storage.get(TOKEN_KEY),
            user_id=storage.get(USER_ID_KEY),
            user=storage.get(CURRENT_USER_KEY) or {},
        )

    def save(self, storage: LocalStorage) -> None:
        if not self.is_authenticated:
            self.clear(storage)
            return
        storage.set(TOKEN_KEY, self.token)
        storage.set(USER_ID_KEY, self.user_id)
        storage.set(CURRENT_USER_KEY, self.user)

    def clear(self, storage: LocalStorage) -> None:
        self.token = None
        self.user_id = None
        self.user = {}
        storage.clear()
