"""Firebase Authentication over the Identity Toolkit REST API.

Password sign-in and sign-up go to ``accounts:signInWithPassword`` and
``accounts:signUp``; a session persisted in local storage is restored at
process start by exchanging its refresh token at the secure token endpoint.
"""

from __future__ import annotations

import json
from typing import Any, Callable, Dict, List, Optional

import httpx
from django.conf import settings

from apps.common import get_logger
from apps.common.protocols import KeyValueStorageProtocol
from .dtos import Identity
from .protocols import IdentityCallback

logger = get_logger(__name__).bind(component="auth", layer="provider")


class AuthProviderError(Exception):
    """Error reported by the identity provider (bad credentials, weak password...)."""

    def __init__(self, code: str, message: Optional[str] = None, status_code: Optional[int] = None):
        self.code = code
        self.message = message or code
        self.status_code = status_code
        super().__init__(self.message)


class AuthProviderUnavailable(Exception):
    """The identity provider could not be reached."""


def _handle_response(response: httpx.Response) -> Dict[str, Any]:
    if response.status_code == 200:
        return response.json()
    try:
        error = response.json().get("error") or {}
        message = str(error.get("message") or "")
    except (ValueError, AttributeError):
        message = ""
    if not message:
        raise AuthProviderError(
            f"HTTP_{response.status_code}", status_code=response.status_code
        )
    # Messages look like "WEAK_PASSWORD : Password should be at least 6 characters"
    code = message.split(" : ", 1)[0].strip()
    raise AuthProviderError(code, message, status_code=response.status_code)


class FirebaseAuthProvider:
    def __init__(
        self,
        api_key: str,
        storage: KeyValueStorageProtocol,
        *,
        auth_url: Optional[str] = None,
        token_url: Optional[str] = None,
        timeout: Optional[float] = None,
        storage_key: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.storage = storage
        self.auth_url = (auth_url or settings.FIREBASE_AUTH_URL).rstrip("/")
        self.token_url = (token_url or settings.FIREBASE_TOKEN_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.FIREBASE_AUTH_TIMEOUT
        self.storage_key = storage_key or settings.AUTH_STORAGE_KEY
        self._transport = transport
        self._identity: Optional[Identity] = None
        self._id_token: Optional[str] = None
        self._refresh_token: Optional[str] = None
        self._listeners: List[IdentityCallback] = []
        self.logger = logger.bind(provider="FirebaseAuthProvider")

    @property
    def current_identity(self) -> Optional[Identity]:
        return self._identity

    @property
    def id_token(self) -> Optional[str]:
        return self._id_token

    def on_identity_change(self, callback: IdentityCallback) -> Callable[[], None]:
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    async def sign_in_with_password(self, email: str, password: str) -> Identity:
        data = await self._post(
            f"{self.auth_url}/accounts:signInWithPassword",
            json={"email": email, "password": password, "returnSecureToken": True},
        )
        return await self._establish(data)

    async def create_account_with_password(self, email: str, password: str) -> Identity:
        data = await self._post(
            f"{self.auth_url}/accounts:signUp",
            json={"email": email, "password": password, "returnSecureToken": True},
        )
        return await self._establish(data)

    async def sign_out(self) -> None:
        self._id_token = None
        self._refresh_token = None
        try:
            await self.storage.delete(self.storage_key)
        except Exception:
            self.logger.exception("Error deleting persisted auth session")
        await self._set_identity(None)

    async def restore(self) -> Optional[Identity]:
        """Restore the persisted session, refreshing its tokens when online."""
        try:
            raw = await self.storage.get(self.storage_key)
        except Exception:
            self.logger.exception("Error reading persisted auth session")
            raw = None
        stored = self._parse_stored(raw) if raw else None
        if stored is None:
            await self._set_identity(None)
            return None

        identity = Identity(
            uid=stored["uid"],
            email=stored.get("email"),
            display_name=stored.get("displayName"),
        )
        try:
            data = await self._post(
                f"{self.token_url}/token",
                data={"grant_type": "refresh_token", "refresh_token": stored["refreshToken"]},
            )
        except AuthProviderError as exc:
            self.logger.info("Persisted auth session rejected", uid=identity.uid, code=exc.code)
            await self.sign_out()
            return None
        except AuthProviderUnavailable as exc:
            # Offline start: keep the cached identity until tokens can be refreshed.
            self.logger.warning("Restoring auth session offline", uid=identity.uid, error=str(exc))
            self._refresh_token = stored["refreshToken"]
            await self._set_identity(identity)
            return identity

        self._id_token = data.get("id_token")
        self._refresh_token = data.get("refresh_token") or stored["refreshToken"]
        await self._persist(identity)
        await self._set_identity(identity)
        self.logger.info("Auth session restored", uid=identity.uid)
        return identity

    # --- internals ---
    def _get_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    async def _post(self, url: str, **kwargs: Any) -> Dict[str, Any]:
        try:
            async with self._get_client() as client:
                response = await client.post(url, params={"key": self.api_key}, **kwargs)
        except httpx.RequestError as exc:
            self.logger.error("Identity provider unavailable", url=url, error=str(exc))
            raise AuthProviderUnavailable(str(exc)) from exc
        return _handle_response(response)

    async def _establish(self, data: Dict[str, Any]) -> Identity:
        identity = Identity(
            uid=data["localId"],
            email=data.get("email"),
            display_name=data.get("displayName") or None,
        )
        self._id_token = data.get("idToken")
        self._refresh_token = data.get("refreshToken")
        await self._persist(identity)
        await self._set_identity(identity)
        return identity

    async def _persist(self, identity: Identity) -> None:
        if not self._refresh_token:
            return
        payload = {
            "uid": identity.uid,
            "email": identity.email,
            "displayName": identity.display_name,
            "refreshToken": self._refresh_token,
        }
        try:
            await self.storage.set(self.storage_key, json.dumps(payload))
        except Exception:
            self.logger.exception("Error persisting auth session", uid=identity.uid)

    def _parse_stored(self, raw: str) -> Optional[Dict[str, Any]]:
        try:
            stored = json.loads(raw)
        except ValueError:
            self.logger.warning("Discarding unreadable auth session")
            return None
        if not isinstance(stored, dict) or not stored.get("uid") or not stored.get("refreshToken"):
            self.logger.warning("Discarding incomplete auth session")
            return None
        return stored

    async def _set_identity(self, identity: Optional[Identity]) -> None:
        self._identity = identity
        for callback in list(self._listeners):
            await callback(identity)
