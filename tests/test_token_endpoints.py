try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover
    import _bootstrap  # type: ignore # noqa: F401

import httpx
import jwt
import pytest

from app.api.auth import authenticate_request
from app.clients.secrets_manager import ResolvedSecret, SecretStoreError, build_secret_id
from app.main import app
from app.services import OAuthTokenRetriever, OAuthTokenSaver, TokenVerifier

SAVE_BODY = {
    "user_id": "u1",
    "access_token": "a",
    "refresh_token": "r",
    "expiry": "2030-01-01T00:00:00Z",
}


class StaticKeyProvider:
    def __init__(self, key: bytes) -> None:
        self.key = key

    def get_public_key(self) -> bytes:
        return self.key


class InMemorySecretStore:
    def __init__(self) -> None:
        self.secrets: dict[str, str] = {}
        self.calls: list[str] = []
        self.broken = False

    def _touch(self, operation: str) -> None:
        self.calls.append(operation)
        if self.broken:
            raise SecretStoreError("store offline")

    def resolve_secret_id(self, domain: str, user_id: str) -> ResolvedSecret:
        self._touch("resolve")
        secret_id = build_secret_id("vault", domain, user_id)
        return ResolvedSecret(secret_id=secret_id, exists=secret_id in self.secrets)

    def get_secret(self, secret_id: str) -> str:
        self._touch("get")
        return self.secrets[secret_id]

    def put_secret(self, secret_id: str, value: str) -> None:
        self._touch("put")
        self.secrets[secret_id] = value

    def create_secret(self, secret_id: str, value: str) -> None:
        self._touch("create")
        self.secrets[secret_id] = value


@pytest.fixture()
def store(public_key_der: bytes):
    from app import dependencies

    secret_store = InMemorySecretStore()
    verifier = TokenVerifier(StaticKeyProvider(public_key_der))
    saver = OAuthTokenSaver(resolver=secret_store, putter=secret_store, creator=secret_store)
    retriever = OAuthTokenRetriever(resolver=secret_store, getter=secret_store)

    app.dependency_overrides.update(
        {
            dependencies.get_token_verifier: lambda: verifier,
            dependencies.get_token_saver: lambda: saver,
            dependencies.get_token_retriever: lambda: retriever,
        }
    )

    yield secret_store

    app.dependency_overrides.clear()


@pytest.fixture()
def bearer(signing_key):
    def _bearer(subject: str = "u1") -> dict:
        token = jwt.encode({"sub": subject}, signing_key, algorithm="RS256")
        return {"Authorization": f"Bearer {token}"}

    return _bearer


def _client() -> httpx.AsyncClient:
    return httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app), base_url="http://testserver"
    )


@pytest.mark.anyio
async def test_save_then_get_round_trip(store, bearer):
    async with _client() as client:
        saved = await client.put("/token/save", json=SAVE_BODY, headers=bearer())
        fetched = await client.get("/token/get", headers=bearer())

    assert saved.status_code == 200
    assert saved.json() == {"Message": "Token saved successfully"}
    assert fetched.status_code == 200
    assert fetched.json() == {
        "access_token": "a",
        "refresh_token": "r",
        "expiry": "2030-01-01T00:00:00Z",
    }
    assert store.calls == ["resolve", "create", "resolve", "get"]


@pytest.mark.anyio
async def test_save_overwrites_existing_token(store, bearer):
    async with _client() as client:
        await client.put("/token/save", json=SAVE_BODY, headers=bearer())
        store.calls.clear()
        response = await client.put(
            "/token/save",
            json={**SAVE_BODY, "access_token": "a2"},
            headers=bearer(),
        )
        fetched = await client.get("/token/get", headers=bearer())

    assert response.status_code == 200
    assert store.calls[:2] == ["resolve", "put"]
    assert "create" not in store.calls
    assert fetched.json()["access_token"] == "a2"


@pytest.mark.anyio
async def test_missing_authorization_header_is_rejected(store):
    async with _client() as client:
        save = await client.put("/token/save", json=SAVE_BODY)
        get = await client.get("/token/get")

    for response in (save, get):
        assert response.status_code == 401
        assert response.json() == {"detail": "Could not authenticate user"}
        assert response.headers["www-authenticate"] == "Bearer"
    assert store.calls == []


@pytest.mark.anyio
@pytest.mark.parametrize(
    "header",
    ["Basic dTE6cGFzcw==", "bearer abc", "Bearer ", "Token abc", "Bearerabc"],
)
async def test_malformed_authorization_header_is_rejected(store, header):
    async with _client() as client:
        response = await client.get("/token/get", headers={"Authorization": header})

    assert response.status_code == 401
    assert store.calls == []


@pytest.mark.anyio
async def test_forged_token_is_rejected(store, foreign_signing_key):
    forged = jwt.encode({"sub": "u1"}, foreign_signing_key, algorithm="RS256")
    async with _client() as client:
        response = await client.put(
            "/token/save",
            json=SAVE_BODY,
            headers={"Authorization": f"Bearer {forged}"},
        )

    assert response.status_code == 401
    assert response.json() == {"detail": "Could not authenticate user"}
    assert store.calls == []


@pytest.mark.anyio
async def test_authentication_runs_before_body_parsing(store):
    async with _client() as client:
        response = await client.put(
            "/token/save",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )

    assert response.status_code == 401


@pytest.mark.anyio
@pytest.mark.parametrize(
    "body",
    [
        {k: v for k, v in SAVE_BODY.items() if k != "refresh_token"},
        {**SAVE_BODY, "access_token": ""},
        {**SAVE_BODY, "expiry": "tomorrow"},
        {**SAVE_BODY, "expiry": "2030-01-01T00:00:00"},
        {**SAVE_BODY, "expiry": 1893456000},
        {**SAVE_BODY, "expiry": 1893456000.5},
        {**SAVE_BODY, "expiry": "1893456000"},
        {**SAVE_BODY, "user_id": "   "},
        {**SAVE_BODY, "access_token": " \t "},
        {**SAVE_BODY, "refresh_token": "\n"},
        ["not", "an", "object"],
    ],
)
async def test_save_rejects_invalid_body(store, bearer, body):
    async with _client() as client:
        response = await client.put("/token/save", json=body, headers=bearer())

    assert response.status_code == 400
    assert response.json() == {"detail": "Could not save token"}
    assert store.calls == []


@pytest.mark.anyio
async def test_save_rejects_malformed_json(store, bearer):
    async with _client() as client:
        response = await client.put(
            "/token/save",
            content=b"{not json",
            headers={**bearer(), "Content-Type": "application/json"},
        )

    assert response.status_code == 400


@pytest.mark.anyio
async def test_save_rejects_token_for_another_user(store, bearer):
    async with _client() as client:
        response = await client.put("/token/save", json=SAVE_BODY, headers=bearer("u2"))

    assert response.status_code == 401
    assert store.calls == []


@pytest.mark.anyio
async def test_save_reports_store_failure(store, bearer):
    store.broken = True
    async with _client() as client:
        response = await client.put("/token/save", json=SAVE_BODY, headers=bearer())

    assert response.status_code == 500
    assert response.json() == {"detail": "Could not save token"}


@pytest.mark.anyio
async def test_get_returns_expired_token(store, bearer):
    expired = {**SAVE_BODY, "expiry": "2001-02-03T04:05:06Z"}
    async with _client() as client:
        await client.put("/token/save", json=expired, headers=bearer())
        response = await client.get("/token/get", headers=bearer())

    assert response.status_code == 200
    assert response.json()["expiry"] == "2001-02-03T04:05:06Z"


@pytest.mark.anyio
async def test_get_without_stored_token(store, bearer):
    async with _client() as client:
        response = await client.get("/token/get", headers=bearer())

    assert response.status_code == 500
    assert response.json() == {"detail": "Could not retrieve token"}
    assert "get" not in store.calls


@pytest.mark.anyio
async def test_get_with_empty_access_token(store, bearer):
    store.secrets["vault/token/u1"] = (
        '{"access_token": "", "refresh_token": "r", "expiry": "2030-01-01T00:00:00Z"}'
    )
    async with _client() as client:
        response = await client.get("/token/get", headers=bearer())

    assert response.status_code == 500


@pytest.mark.anyio
async def test_get_without_identity(store):
    app.dependency_overrides[authenticate_request] = lambda: None
    async with _client() as client:
        response = await client.get("/token/get")

    assert response.status_code == 401
    assert response.json() == {"detail": "Could not retrieve token"}


@pytest.mark.anyio
async def test_openapi_documents_save_body():
    async with _client() as client:
        response = await client.get("/openapi.json")

    operation = response.json()["paths"]["/token/save"]["put"]
    body = operation["requestBody"]
    schema = body["content"]["application/json"]["schema"]
    assert body["required"] is True
    assert set(schema["required"]) == {"user_id", "access_token", "refresh_token", "expiry"}
    assert schema["properties"]["expiry"]["format"] == "date-time"


@pytest.mark.anyio
async def test_health_needs_no_token():
    async with _client() as client:
        response = await client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
