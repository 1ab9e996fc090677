import json
import unittest
from urllib.parse import parse_qs

import httpx

from apps.auth.dtos import Identity
from apps.auth.providers import (
    AuthProviderError,
    AuthProviderUnavailable,
    FirebaseAuthProvider,
)

STORAGE_KEY = "@auth_session"


class FakeStorage:
    def __init__(self):
        self.data = {}

    async def get(self, key):
        return self.data.get(key)

    async def set(self, key, value):
        self.data[key] = value

    async def delete(self, key):
        self.data.pop(key, None)


class FakeIdentityToolkit:
    """Serves the handful of Identity Toolkit and secure token endpoints we call."""

    def __init__(self):
        self.accounts = {"mech@example.com": ("secret", "uid-mech")}
        self.requests = []
        self.offline = False
        self.revoked = False

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.offline:
            raise httpx.ConnectError("network unreachable", request=request)
        if request.url.params.get("key") != "test-key":
            return self._error(400, "API key not valid. Please pass a valid API key.")
        path = request.url.path
        if path.endswith("accounts:signInWithPassword"):
            body = json.loads(request.content)
            account = self.accounts.get(body["email"])
            if account is None or account[0] != body["password"]:
                return self._error(400, "INVALID_LOGIN_CREDENTIALS")
            return self._session(account[1], body["email"])
        if path.endswith("accounts:signUp"):
            body = json.loads(request.content)
            if body["email"] in self.accounts:
                return self._error(400, "EMAIL_EXISTS")
            if len(body["password"]) < 6:
                return self._error(400, "WEAK_PASSWORD : Password should be at least 6 characters")
            uid = f"uid-{len(self.accounts) + 1}"
            self.accounts[body["email"]] = (body["password"], uid)
            return self._session(uid, body["email"])
        if path.endswith("/token"):
            form = parse_qs(request.content.decode())
            if self.revoked or form.get("grant_type") != ["refresh_token"]:
                return self._error(400, "TOKEN_EXPIRED")
            return httpx.Response(
                200,
                json={
                    "user_id": "uid-mech",
                    "id_token": "id-token-refreshed",
                    "refresh_token": "refresh-rotated",
                    "expires_in": "3600",
                },
            )
        return httpx.Response(404, text="not found")

    @staticmethod
    def _session(uid, email):
        return httpx.Response(
            200,
            json={
                "localId": uid,
                "email": email,
                "displayName": "",
                "idToken": f"id-token-{uid}",
                "refreshToken": f"refresh-{uid}",
                "expiresIn": "3600",
            },
        )

    @staticmethod
    def _error(status, message):
        return httpx.Response(status, json={"error": {"code": status, "message": message}})


class FirebaseAuthProviderTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.toolkit = FakeIdentityToolkit()
        self.storage = FakeStorage()
        self.provider = self._provider()
        self.notifications = []

        async def record(identity):
            self.notifications.append(identity)

        self.unsubscribe = self.provider.on_identity_change(record)

    def _provider(self, api_key="test-key"):
        return FirebaseAuthProvider(
            api_key=api_key,
            storage=self.storage,
            auth_url="https://auth.test/v1",
            token_url="https://token.test/v1",
            timeout=1,
            storage_key=STORAGE_KEY,
            transport=httpx.MockTransport(self.toolkit),
        )

    def _store_session(self, **overrides):
        session = {
            "uid": "uid-mech",
            "email": "mech@example.com",
            "displayName": None,
            "refreshToken": "refresh-stored",
        }
        session.update(overrides)
        self.storage.data[STORAGE_KEY] = json.dumps(session)

    async def test_sign_in_sets_identity_and_persists_session(self):
        identity = await self.provider.sign_in_with_password("mech@example.com", "secret")
        self.assertEqual(identity, Identity(uid="uid-mech", email="mech@example.com"))
        self.assertEqual(self.provider.current_identity, identity)
        self.assertEqual(self.provider.id_token, "id-token-uid-mech")
        self.assertEqual(self.notifications, [identity])
        stored = json.loads(self.storage.data[STORAGE_KEY])
        self.assertEqual(stored["refreshToken"], "refresh-uid-mech")
        request = self.toolkit.requests[-1]
        self.assertEqual(json.loads(request.content)["returnSecureToken"], True)

    async def test_sign_in_rejection_raises_provider_error(self):
        with self.assertRaises(AuthProviderError) as ctx:
            await self.provider.sign_in_with_password("mech@example.com", "nope")
        self.assertEqual(ctx.exception.code, "INVALID_LOGIN_CREDENTIALS")
        self.assertEqual(ctx.exception.status_code, 400)
        self.assertIsNone(self.provider.current_identity)
        self.assertEqual(self.notifications, [])

    async def test_sign_up_error_code_strips_description(self):
        with self.assertRaises(AuthProviderError) as ctx:
            await self.provider.create_account_with_password("new@example.com", "123")
        self.assertEqual(ctx.exception.code, "WEAK_PASSWORD")
        self.assertIn("at least 6 characters", ctx.exception.message)

    async def test_sign_up_creates_identity(self):
        identity = await self.provider.create_account_with_password("new@example.com", "secret1")
        self.assertEqual(identity.uid, "uid-2")
        self.assertEqual(self.notifications, [identity])

    async def test_network_failure_raises_unavailable(self):
        self.toolkit.offline = True
        with self.assertLogs("apps.auth.providers", level="ERROR"):
            with self.assertRaises(AuthProviderUnavailable):
                await self.provider.sign_in_with_password("mech@example.com", "secret")

    async def test_sign_out_clears_session_and_notifies(self):
        await self.provider.sign_in_with_password("mech@example.com", "secret")
        await self.provider.sign_out()
        self.assertIsNone(self.provider.current_identity)
        self.assertIsNone(self.provider.id_token)
        self.assertNotIn(STORAGE_KEY, self.storage.data)
        self.assertIsNone(self.notifications[-1])

    async def test_restore_refreshes_persisted_session(self):
        self._store_session()
        identity = await self.provider.restore()
        self.assertEqual(identity.uid, "uid-mech")
        self.assertEqual(self.provider.id_token, "id-token-refreshed")
        self.assertEqual(json.loads(self.storage.data[STORAGE_KEY])["refreshToken"], "refresh-rotated")
        self.assertEqual(self.notifications, [identity])

    async def test_restore_without_session_announces_signed_out(self):
        self.assertIsNone(await self.provider.restore())
        self.assertEqual(self.notifications, [None])
        self.assertEqual(self.toolkit.requests, [])

    async def test_restore_with_revoked_token_signs_out(self):
        self._store_session()
        self.toolkit.revoked = True
        self.assertIsNone(await self.provider.restore())
        self.assertNotIn(STORAGE_KEY, self.storage.data)
        self.assertEqual(self.notifications, [None])

    async def test_restore_offline_keeps_cached_identity(self):
        self._store_session()
        self.toolkit.offline = True
        with self.assertLogs("apps.auth.providers", level="WARNING"):
            identity = await self.provider.restore()
        self.assertEqual(identity, Identity(uid="uid-mech", email="mech@example.com"))
        self.assertIn(STORAGE_KEY, self.storage.data)

    async def test_restore_discards_unreadable_session(self):
        self.storage.data[STORAGE_KEY] = "{not json"
        with self.assertLogs("apps.auth.providers", level="WARNING"):
            self.assertIsNone(await self.provider.restore())
        self.assertEqual(self.toolkit.requests, [])

    async def test_unsubscribe_stops_notifications(self):
        self.unsubscribe()
        await self.provider.sign_in_with_password("mech@example.com", "secret")
        self.assertEqual(self.notifications, [])


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
