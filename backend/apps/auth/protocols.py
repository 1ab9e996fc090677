from __future__ import annotations

from typing import Any, Awaitable, Callable, Dict, Optional, Protocol

from apps.common.protocols import DocumentSnapshot

from .dtos import Identity

IdentityCallback = Callable[[Optional[Identity]], Awaitable[None]]


class AuthProviderProtocol(Protocol):
    @property
    def current_identity(self) -> Optional[Identity]: ...

    async def sign_in_with_password(self, email: str, password: str) -> Identity: ...

    async def create_account_with_password(self, email: str, password: str) -> Identity: ...

    async def sign_out(self) -> None: ...

    def on_identity_change(self, callback: IdentityCallback) -> Callable[[], None]: ...


class UserProfileRepositoryProtocol(Protocol):
    async def get(self, uid: str) -> Optional[DocumentSnapshot]: ...

    async def create(self, uid: str, data: Dict[str, Any]) -> None: ...
