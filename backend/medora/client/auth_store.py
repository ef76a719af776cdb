"""Signed-in user and tokens kept on the client, persisted like the cart."""
from typing import Any, Dict, Optional

from medora.client.storage import JsonFileStorage


class AuthStore:
    def __init__(self, storage: JsonFileStorage):
        self.storage = storage
        state = storage.load()
        self.user: Optional[Dict[str, Any]] = state.get("user")
        self.access_token: Optional[str] = state.get("accessToken")
        self.refresh_token: Optional[str] = state.get("refreshToken")

    @property
    def is_authenticated(self) -> bool:
        return self.access_token is not None

    def _persist(self) -> None:
        self.storage.save({
            "user": self.user,
            "accessToken": self.access_token,
            "refreshToken": self.refresh_token,
        })

    def set_auth(self, user: Dict[str, Any], access_token: str, refresh_token: str) -> None:
        self.user = user
        self.access_token = access_token
        self.refresh_token = refresh_token
        self._persist()

    def set_access_token(self, access_token: str) -> None:
        self.access_token = access_token
        self._persist()

    def logout(self) -> None:
        self.user = None
        self.access_token = None
        self.refresh_token = None
        self._persist()
