from __future__ import annotations

from typing import Optional

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

from apps.common.protocols import DocumentStoreProtocol, KeyValueStorageProtocol
from apps.common.storage import CacheKeyValueStorage

from .protocols import AuthProviderProtocol
from .providers import FirebaseAuthProvider
from .repositories import UserProfileRepository
from .services import SessionStore


def build_auth_provider(storage: Optional[KeyValueStorageProtocol] = None) -> FirebaseAuthProvider:
    if not settings.FIREBASE_API_KEY:
        raise ImproperlyConfigured(
            'FIREBASE_API_KEY is empty. Set FIREBASE_API_KEY to the project web API key.'
        )
    return FirebaseAuthProvider(
        api_key=settings.FIREBASE_API_KEY,
        storage=storage if storage is not None else CacheKeyValueStorage(),
    )


def build_session_store(
    auth: AuthProviderProtocol,
    documents: Optional[DocumentStoreProtocol] = None,
) -> SessionStore:
    if documents is None:
        from apps.common.documents import FirestoreDocumentStore

        documents = FirestoreDocumentStore()
    return SessionStore(auth=auth, profiles=UserProfileRepository(documents))
