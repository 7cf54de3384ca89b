from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from types import SimpleNamespace
from uuid import UUID, uuid4

import pytest
from fastapi.testclient import TestClient

from tests.tournaments.tournament_fixtures import RecordingPublisher, seed_tournament
from tournament_hub.api.routes import route_helpers
from tournament_hub.api.routes import tournaments as tournaments_routes
from tournament_hub.main import app
from tournament_hub.tournaments.constants import (
    EVENT_TOURNAMENT_CREATED,
    EVENT_TOURNAMENT_JOINED,
    TOURNAMENT_STATUS_COMPLETED,
)
from tournament_hub.tournaments.errors import ProfileRequiredError, RegistrationCodeExhaustedError
from tournament_hub.tournaments.events import BufferedEventPublisher
from tournament_hub.tournaments.memory_store import InMemoryTournamentStore
from tournament_hub.tournaments.types import TournamentListItem

INTERNAL_TOKEN = "internal-secret"


def _headers(user_id: UUID | None = None) -> dict[str, str]:
    headers = {"X-Internal-Token": INTERNAL_TOKEN}
    if user_id is not None:
        headers["X-User-Id"] = str(user_id)
    return headers


@pytest.fixture
def store(monkeypatch) -> InMemoryTournamentStore:
    memory_store = InMemoryTournamentStore()

    @asynccontextmanager
    async def fake_open_tournament_store():
        yield memory_store

    monkeypatch.setattr(
        route_helpers,
        "get_settings",
        lambda: SimpleNamespace(
            internal_api_token=INTERNAL_TOKEN,
            internal_api_allowlist="127.0.0.1/32",
            internal_api_trusted_proxies="",
        ),
    )
    monkeypatch.setattr(
        route_helpers,
        "extract_client_ip",
        lambda request, trusted_proxies: "127.0.0.1",
    )
    monkeypatch.setattr(tournaments_routes, "open_tournament_store", fake_open_tournament_store)
    return memory_store


@pytest.fixture
def published(monkeypatch) -> RecordingPublisher:
    target = RecordingPublisher()
    monkeypatch.setattr(tournaments_routes, "_event_buffer", lambda: BufferedEventPublisher(target))
    return target


def _create_payload(**overrides: object) -> dict[str, object]:
    payload: dict[str, object] = {
        "title": "Spring Open",
        "game": "Golf",
        "location": "Pine Valley",
        "start_at": "2026-06-01T08:00:00+00:00",
        "max_participants": 2,
    }
    payload.update(overrides)
    return payload


def test_requests_without_gateway_token_are_forbidden(store) -> None:
    client = TestClient(app)
    response = client.post(
        "/tournaments",
        json=_create_payload(),
        headers={"X-User-Id": str(uuid4())},
    )

    assert response.status_code == 403
    assert response.json() == {"detail": {"code": "E_FORBIDDEN"}}


def test_requests_from_disallowed_ip_are_forbidden(store, monkeypatch) -> None:
    monkeypatch.setattr(
        route_helpers,
        "extract_client_ip",
        lambda request, trusted_proxies: "10.0.0.25",
    )

    client = TestClient(app)
    response = client.get("/tournaments/available", headers=_headers(uuid4()))

    assert response.status_code == 403


def test_requests_without_user_are_unauthenticated(store) -> None:
    client = TestClient(app)
    response = client.post("/tournaments", json=_create_payload(), headers=_headers())

    assert response.status_code == 401
    assert response.json() == {"detail": {"code": "E_UNAUTHENTICATED"}}


def test_create_tournament_returns_code_and_publishes_after_commit(store, published) -> None:
    organizer_id = uuid4()

    client = TestClient(app)
    response = client.post("/tournaments", json=_create_payload(), headers=_headers(organizer_id))

    assert response.status_code == 201
    body = response.json()
    assert body["registration_code"].startswith("GOLF-")
    assert body["status"] == "upcoming"
    assert body["created_by"] == str(organizer_id)
    assert body["max_participants"] == 2
    assert [event.name for event in published.events] == [EVENT_TOURNAMENT_CREATED]


def test_create_tournament_validation_errors(store, published) -> None:
    client = TestClient(app)
    response = client.post(
        "/tournaments",
        json=_create_payload(max_participants=0),
        headers=_headers(uuid4()),
    )
    assert response.status_code == 422

    response = client.post(
        "/tournaments",
        json=_create_payload(title="   "),
        headers=_headers(uuid4()),
    )
    assert response.status_code == 422
    assert response.json()["detail"]["code"] == "E_TOURNAMENT_INVALID"
    assert published.events == []


def test_create_tournament_rejects_naive_datetimes(store, published) -> None:
    client = TestClient(app)
    response = client.post(
        "/tournaments",
        json=_create_payload(
            start_at="2026-06-01T10:00:00",
            end_at="2026-06-02T10:00:00Z",
        ),
        headers=_headers(uuid4()),
    )

    assert response.status_code == 422
    assert published.events == []


def test_create_tournament_without_profile_returns_409(store, published, monkeypatch) -> None:
    monkeypatch.setattr(store, "_registered_user_ids", set())

    client = TestClient(app)
    response = client.post("/tournaments", json=_create_payload(), headers=_headers(uuid4()))

    assert response.status_code == 409
    assert response.json()["detail"]["code"] == "E_PROFILE_REQUIRED"
    assert published.events == []


def test_create_tournament_returns_503_when_codes_exhausted(store, monkeypatch) -> None:
    async def fake_create_tournament(allocator, *, draft, now_utc, publisher):
        raise RegistrationCodeExhaustedError

    monkeypatch.setattr(tournaments_routes, "create_tournament", fake_create_tournament)

    client = TestClient(app)
    response = client.post("/tournaments", json=_create_payload(), headers=_headers(uuid4()))

    assert response.status_code == 503
    assert response.json()["detail"]["code"] == "E_REGISTRATION_CODE_EXHAUSTED"


def test_join_flow_over_http(store, published) -> None:
    client = TestClient(app)
    created = client.post("/tournaments", json=_create_payload(), headers=_headers(uuid4()))
    tournament_id = created.json()["id"]
    code = created.json()["registration_code"]
    first_user, second_user, third_user = uuid4(), uuid4(), uuid4()

    first = client.post(
        "/tournaments/join-by-code",
        json={"registration_code": code.lower()},
        headers=_headers(first_user),
    )
    assert first.status_code == 201
    assert first.json()["participants_total"] == 1
    assert first.json()["max_participants"] == 2

    second = client.post(f"/tournaments/{tournament_id}/join", headers=_headers(second_user))
    assert second.status_code == 201
    assert second.json()["participants_total"] == 2

    full = client.post(f"/tournaments/{tournament_id}/join", headers=_headers(third_user))
    assert full.status_code == 409
    assert full.json() == {
        "detail": {"code": "E_TOURNAMENT_FULL", "message": "Tournament is full"},
    }

    again = client.post(f"/tournaments/{tournament_id}/join", headers=_headers(first_user))
    assert again.status_code == 409
    assert again.json()["detail"]["code"] == "E_ALREADY_JOINED"

    joined_events = [event for event in published.events if event.name == EVENT_TOURNAMENT_JOINED]
    assert len(joined_events) == 2


def test_join_by_unknown_code_returns_404(store) -> None:
    client = TestClient(app)
    response = client.post(
        "/tournaments/join-by-code",
        json={"registration_code": "NOPE-0000AA"},
        headers=_headers(uuid4()),
    )

    assert response.status_code == 404
    assert response.json() == {
        "detail": {"code": "E_INVALID_CODE", "message": "Invalid registration code"},
    }


def test_join_closed_tournament_returns_409(store) -> None:
    asyncio.run(seed_tournament(store, status=TOURNAMENT_STATUS_COMPLETED))

    client = TestClient(app)
    response = client.post(
        "/tournaments/join-by-code",
        json={"registration_code": "GOLF-4821QX"},
        headers=_headers(uuid4()),
    )

    assert response.status_code == 409
    assert response.json()["detail"]["code"] == "E_REGISTRATION_CLOSED"


def test_join_without_profile_returns_409(store, published, monkeypatch) -> None:
    organizer_id = uuid4()
    tournament = asyncio.run(seed_tournament(store, created_by=organizer_id))
    monkeypatch.setattr(store, "_registered_user_ids", {organizer_id})

    client = TestClient(app)
    response = client.post(
        f"/tournaments/{tournament.tournament_id}/join",
        headers=_headers(uuid4()),
    )

    assert response.status_code == 409
    assert response.json()["detail"] == {
        "code": "E_PROFILE_REQUIRED",
        "message": "Create your profile before organizing or joining tournaments",
    }
    assert published.events == []


def test_join_unknown_tournament_returns_404(store) -> None:
    client = TestClient(app)
    response = client.post(f"/tournaments/{uuid4()}/join", headers=_headers(uuid4()))

    assert response.status_code == 404
    assert response.json()["detail"]["code"] == "E_TOURNAMENT_NOT_FOUND"


def test_list_available_route(store, monkeypatch) -> None:
    tournament = asyncio.run(seed_tournament(store))
    viewer_id = uuid4()
    captured: dict[str, object] = {}

    async def fake_list_available_tournaments(session, *, user_id):
        captured["user_id"] = user_id
        return [TournamentListItem(tournament=tournament, participants_total=3)]

    monkeypatch.setattr(
        tournaments_routes,
        "list_available_tournaments",
        fake_list_available_tournaments,
    )

    client = TestClient(app)
    response = client.get("/tournaments/available", headers=_headers(viewer_id))

    assert response.status_code == 200
    assert captured["user_id"] == viewer_id
    items = response.json()["tournaments"]
    assert len(items) == 1
    assert items[0]["participants_total"] == 3
    assert items[0]["tournament"]["registration_code"] == "GOLF-4821QX"
