from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, List, Optional

from django.conf import settings
from django.utils import timezone

from apps.common import get_logger
from .dtos import Identity, Role, SessionDTO
from .protocols import AuthProviderProtocol, UserProfileRepositoryProtocol

logger = get_logger(__name__).bind(component="auth", layer="service")

SessionListener = Callable[[SessionDTO], None]


class SessionStore:
    """Process-wide session: the signed-in identity and its derived role.

    The role is read from the identity's profile document after every
    identity-change notification from the auth provider. It is a hint for
    feature visibility only; nothing here enforces it.
    """

    def __init__(
        self,
        auth: AuthProviderProtocol,
        profiles: UserProfileRepositoryProtocol,
        default_role: Optional[Role] = None,
    ):
        self.auth = auth
        self.profiles = profiles
        self.default_role = default_role or Role(settings.DEFAULT_USER_ROLE)
        self._identity: Optional[Identity] = None
        self._role: Optional[Role] = None
        self._ready = asyncio.Event()
        self._restoring = False
        self._handled = False
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._listeners: List[SessionListener] = []
        self.logger = logger.bind(service="SessionStore")

    @property
    def identity(self) -> Optional[Identity]:
        return self._identity

    @property
    def role(self) -> Optional[Role]:
        return self._role

    @property
    def session(self) -> SessionDTO:
        return SessionDTO(identity=self._identity, role=self._role)

    @property
    def is_authenticated(self) -> bool:
        return self._identity is not None

    @property
    def is_admin(self) -> bool:
        return self._role is Role.ADMIN

    @property
    def loading(self) -> bool:
        return not self._ready.is_set()

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def start(self, restore: Optional[Callable[[], Awaitable[Any]]] = None) -> None:
        """Subscribe to identity changes and derive the initial session.

        ``restore`` is the provider's saved sign-in recovery. The store stays
        loading until it has finished, so readers never see a signed-out
        session that is about to be replaced by the restored one.
        """
        if self._unsubscribe is not None:
            return
        self.logger.debug("Subscribing to identity changes")
        self._unsubscribe = self.auth.on_identity_change(self._handle_identity_change)
        if restore is not None:
            self._restoring = True
            try:
                await restore()
            except Exception:
                self.logger.exception("Error restoring saved sign-in")
            finally:
                self._restoring = False
        current = self.auth.current_identity
        if self._handled and self._identity == current:
            self._ready.set()
        else:
            await self._handle_identity_change(current)

    def stop(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
            self.logger.debug("Unsubscribed from identity changes")

    async def wait_until_ready(self) -> SessionDTO:
        await self._ready.wait()
        return self.session

    async def refresh(self) -> SessionDTO:
        """Re-derive the role for the current identity."""
        await self._handle_identity_change(self._identity)
        return self.session

    # --- intents ---
    async def sign_in(self, email: str, password: str) -> Identity:
        self.logger.debug("Signing in", email=email)
        try:
            identity = await self.auth.sign_in_with_password(email, password)
        except Exception as exc:
            self.logger.warning("Sign-in failed", email=email, error=str(exc))
            raise
        self.logger.info("Signed in", uid=identity.uid)
        return identity

    async def sign_up(self, email: str, password: str, display_name: str) -> Identity:
        self.logger.debug("Signing up", email=email)
        try:
            identity = await self.auth.create_account_with_password(email, password)
            await self.profiles.create(
                identity.uid,
                {
                    "name": display_name,
                    "email": email,
                    "role": self.default_role.value,
                    "createdAt": timezone.now().isoformat(),
                },
            )
        except Exception as exc:
            self.logger.warning("Sign-up failed", email=email, error=str(exc))
            raise
        self.logger.info("Account created", uid=identity.uid, role=self.default_role.value)
        # The provider may have announced the identity before the profile existed.
        if self._identity is not None and self._identity.uid == identity.uid:
            await self.refresh()
        return identity

    async def sign_out(self) -> None:
        uid = self._identity.uid if self._identity else None
        self.logger.debug("Signing out", uid=uid)
        try:
            await self.auth.sign_out()
        except Exception as exc:
            self.logger.warning("Sign-out failed", uid=uid, error=str(exc))
            raise
        self.logger.info("Signed out", uid=uid)

    # --- identity notifications ---
    async def _handle_identity_change(self, identity: Optional[Identity]) -> None:
        previous = self._identity
        self._identity = identity
        if identity is None:
            self._role = None
        else:
            if previous is None or previous.uid != identity.uid:
                self._role = None
            role = await self._fetch_role(identity)
            if self._identity != identity:
                self.logger.debug("Discarding role for superseded identity", uid=identity.uid)
                return
            self._role = role
        self._handled = True
        if not self._restoring:
            self._ready.set()
        self.logger.debug(
            "Session updated",
            uid=identity.uid if identity else None,
            role=self._role.value if self._role else None,
        )
        session = self.session
        for listener in list(self._listeners):
            try:
                listener(session)
            except Exception:
                self.logger.exception("Session listener failed")

    async def _fetch_role(self, identity: Identity) -> Optional[Role]:
        try:
            document = await self.profiles.get(identity.uid)
        except Exception:
            self.logger.exception("Error fetching user profile", uid=identity.uid)
            return None
        if document is None:
            self.logger.info("User profile not found", uid=identity.uid)
            return None
        raw_role = document.data.get("role")
        role = Role.parse(raw_role)
        if role is None and raw_role is not None:
            self.logger.warning("Unknown role on user profile", uid=identity.uid, role=raw_role)
        return role
