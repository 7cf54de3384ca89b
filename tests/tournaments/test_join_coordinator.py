from __future__ import annotations

import asyncio
from uuid import uuid4

import pytest

from tests.tournaments.tournament_fixtures import (
    NOW_UTC,
    FailingPublisher,
    RecordingPublisher,
    YieldingStore,
    seed_tournament,
)
from tournament_hub.tournaments.constants import (
    EVENT_TOURNAMENT_JOINED,
    TOURNAMENT_STATUS_COMPLETED,
    TOURNAMENT_STATUS_ONGOING,
)
from tournament_hub.tournaments.errors import (
    AlreadyJoinedError,
    InvalidRegistrationCodeError,
    MembershipConflictError,
    ProfileRequiredError,
    RegistrationClosedError,
    TournamentFullError,
    TournamentNotFoundError,
)
from tournament_hub.tournaments.join import JoinCoordinator
from tournament_hub.tournaments.memory_store import InMemoryTournamentStore
from tournament_hub.tournaments.types import MembershipSnapshot


def _coordinator(store: InMemoryTournamentStore, **kwargs: object) -> JoinCoordinator:
    return JoinCoordinator(store, clock=lambda: NOW_UTC, **kwargs)


@pytest.mark.asyncio
async def test_join_flow_fills_tournament_then_rejects() -> None:
    store = InMemoryTournamentStore()
    tournament = await seed_tournament(store, registration_code="GOLF-4821QX", max_participants=2)
    coordinator = _coordinator(store)
    first_user, second_user, third_user = uuid4(), uuid4(), uuid4()

    first = await coordinator.join_by_code(user_id=first_user, registration_code="GOLF-4821QX")
    assert first.participants_total == 1
    assert first.membership.user_id == first_user
    assert first.membership.joined_at == NOW_UTC

    second = await coordinator.join_by_tournament(
        user_id=second_user,
        tournament_id=tournament.tournament_id,
    )
    assert second.participants_total == 2

    with pytest.raises(TournamentFullError):
        await coordinator.join_by_tournament(
            user_id=third_user,
            tournament_id=tournament.tournament_id,
        )

    with pytest.raises(AlreadyJoinedError):
        await coordinator.join_by_tournament(
            user_id=first_user,
            tournament_id=tournament.tournament_id,
        )

    assert await store.count_memberships(tournament.tournament_id) == 2


@pytest.mark.asyncio
async def test_join_twice_is_rejected_and_keeps_single_membership() -> None:
    store = InMemoryTournamentStore()
    tournament = await seed_tournament(store)
    coordinator = _coordinator(store)
    user_id = uuid4()

    await coordinator.join_by_tournament(user_id=user_id, tournament_id=tournament.tournament_id)
    with pytest.raises(AlreadyJoinedError) as exc_info:
        await coordinator.join_by_code(user_id=user_id, registration_code="GOLF-4821QX")

    assert exc_info.value.code == "E_ALREADY_JOINED"
    assert exc_info.value.message == "You have already joined this tournament"
    assert await store.count_memberships(tournament.tournament_id) == 1


@pytest.mark.asyncio
async def test_join_single_slot_tournament() -> None:
    store = InMemoryTournamentStore()
    tournament = await seed_tournament(store, max_participants=1)
    coordinator = _coordinator(store)

    result = await coordinator.join_by_tournament(
        user_id=uuid4(),
        tournament_id=tournament.tournament_id,
    )
    assert result.participants_total == 1
    assert result.tournament.max_participants == 1

    with pytest.raises(TournamentFullError) as exc_info:
        await coordinator.join_by_tournament(
            user_id=uuid4(),
            tournament_id=tournament.tournament_id,
        )
    assert exc_info.value.message == "Tournament is full"


@pytest.mark.asyncio
async def test_join_by_code_is_case_and_whitespace_insensitive() -> None:
    store = InMemoryTournamentStore()
    tournament = await seed_tournament(store, registration_code="GOLF-4821QX")

    result = await _coordinator(store).join_by_code(
        user_id=uuid4(),
        registration_code="  golf-4821qx ",
    )

    assert result.tournament.tournament_id == tournament.tournament_id


@pytest.mark.asyncio
@pytest.mark.parametrize("raw_code", ["GOLF-0000ZZ", "", "   "])
async def test_join_by_code_rejects_unknown_code(raw_code: str) -> None:
    store = InMemoryTournamentStore()
    await seed_tournament(store, registration_code="GOLF-4821QX")

    with pytest.raises(InvalidRegistrationCodeError) as exc_info:
        await _coordinator(store).join_by_code(user_id=uuid4(), registration_code=raw_code)

    assert exc_info.value.code == "E_INVALID_CODE"


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [TOURNAMENT_STATUS_ONGOING, TOURNAMENT_STATUS_COMPLETED])
async def test_join_is_rejected_when_registration_closed(status: str) -> None:
    store = InMemoryTournamentStore()
    tournament = await seed_tournament(store, status=status)
    coordinator = _coordinator(store)

    with pytest.raises(RegistrationClosedError):
        await coordinator.join_by_code(user_id=uuid4(), registration_code="GOLF-4821QX")
    with pytest.raises(RegistrationClosedError):
        await coordinator.join_by_tournament(
            user_id=uuid4(),
            tournament_id=tournament.tournament_id,
        )

    assert await store.count_memberships(tournament.tournament_id) == 0


@pytest.mark.asyncio
async def test_existing_member_of_closed_tournament_gets_already_joined() -> None:
    store = InMemoryTournamentStore()
    tournament = await seed_tournament(store)
    coordinator = _coordinator(store)
    user_id = uuid4()
    await coordinator.join_by_tournament(user_id=user_id, tournament_id=tournament.tournament_id)
    store.set_status(tournament.tournament_id, TOURNAMENT_STATUS_COMPLETED)

    with pytest.raises(AlreadyJoinedError):
        await coordinator.join_by_tournament(
            user_id=user_id,
            tournament_id=tournament.tournament_id,
        )


@pytest.mark.asyncio
async def test_join_unknown_tournament_raises_not_found() -> None:
    with pytest.raises(TournamentNotFoundError):
        await _coordinator(InMemoryTournamentStore()).join_by_tournament(
            user_id=uuid4(),
            tournament_id=uuid4(),
        )


@pytest.mark.asyncio
async def test_concurrent_joins_for_last_slot_admit_exactly_one_user() -> None:
    store = YieldingStore()
    tournament = await seed_tournament(store, max_participants=3)
    coordinator = _coordinator(store)
    for _ in range(2):
        await coordinator.join_by_tournament(
            user_id=uuid4(),
            tournament_id=tournament.tournament_id,
        )

    results = await asyncio.gather(
        *(
            coordinator.join_by_tournament(user_id=uuid4(), tournament_id=tournament.tournament_id)
            for _ in range(8)
        ),
        return_exceptions=True,
    )

    admitted = [item for item in results if not isinstance(item, BaseException)]
    rejected = [item for item in results if isinstance(item, BaseException)]
    assert len(admitted) == 1
    assert admitted[0].participants_total == 3
    assert all(isinstance(item, TournamentFullError) for item in rejected)
    assert await store.count_memberships(tournament.tournament_id) == 3


@pytest.mark.asyncio
async def test_concurrent_duplicate_joins_create_single_membership() -> None:
    store = YieldingStore()
    tournament = await seed_tournament(store)
    coordinator = _coordinator(store)
    user_id = uuid4()

    results = await asyncio.gather(
        *(
            coordinator.join_by_code(user_id=user_id, registration_code="GOLF-4821QX")
            for _ in range(4)
        ),
        return_exceptions=True,
    )

    assert sum(1 for item in results if not isinstance(item, BaseException)) == 1
    assert sum(1 for item in results if isinstance(item, AlreadyJoinedError)) == 3
    assert await store.count_memberships(tournament.tournament_id) == 1


@pytest.mark.asyncio
async def test_store_membership_conflict_is_reported_as_already_joined() -> None:
    class _ConflictingStore(InMemoryTournamentStore):
        async def insert_membership(self, **kwargs: object) -> MembershipSnapshot:
            raise MembershipConflictError("duplicate")

    store = _ConflictingStore()
    tournament = await seed_tournament(store)

    with pytest.raises(AlreadyJoinedError):
        await _coordinator(store).join_by_tournament(
            user_id=uuid4(),
            tournament_id=tournament.tournament_id,
        )


@pytest.mark.asyncio
async def test_lock_is_released_after_rejected_join() -> None:
    store = InMemoryTournamentStore()
    tournament = await seed_tournament(store, max_participants=2)
    coordinator = _coordinator(store)
    user_id = uuid4()
    await coordinator.join_by_tournament(user_id=user_id, tournament_id=tournament.tournament_id)

    with pytest.raises(AlreadyJoinedError):
        await coordinator.join_by_tournament(
            user_id=user_id,
            tournament_id=tournament.tournament_id,
        )

    result = await asyncio.wait_for(
        coordinator.join_by_tournament(user_id=uuid4(), tournament_id=tournament.tournament_id),
        timeout=1.0,
    )
    assert result.participants_total == 2


@pytest.mark.asyncio
async def test_successful_join_publishes_joined_event() -> None:
    store = InMemoryTournamentStore()
    tournament = await seed_tournament(store)
    publisher = RecordingPublisher()
    user_id = uuid4()

    await _coordinator(store, publisher=publisher).join_by_tournament(
        user_id=user_id,
        tournament_id=tournament.tournament_id,
    )

    assert len(publisher.events) == 1
    event = publisher.events[0]
    assert event.name == EVENT_TOURNAMENT_JOINED
    assert event.occurred_at == NOW_UTC
    assert event.payload == {
        "tournament_id": str(tournament.tournament_id),
        "user_id": str(user_id),
        "participants_total": 1,
    }


@pytest.mark.asyncio
async def test_rejected_join_publishes_nothing() -> None:
    store = InMemoryTournamentStore()
    tournament = await seed_tournament(store, max_participants=1)
    publisher = RecordingPublisher()
    coordinator = _coordinator(store, publisher=publisher)
    await coordinator.join_by_tournament(user_id=uuid4(), tournament_id=tournament.tournament_id)

    with pytest.raises(TournamentFullError):
        await coordinator.join_by_tournament(
            user_id=uuid4(),
            tournament_id=tournament.tournament_id,
        )

    assert len(publisher.events) == 1


@pytest.mark.asyncio
async def test_publisher_failure_does_not_fail_join() -> None:
    store = InMemoryTournamentStore()
    tournament = await seed_tournament(store)
    publisher = FailingPublisher()

    result = await _coordinator(store, publisher=publisher).join_by_tournament(
        user_id=uuid4(),
        tournament_id=tournament.tournament_id,
    )

    assert result.participants_total == 1
    assert publisher.calls == 1
    assert await store.count_memberships(tournament.tournament_id) == 1


@pytest.mark.asyncio
async def test_join_without_profile_is_rejected_and_releases_lock() -> None:
    organizer_id, member_id = uuid4(), uuid4()
    store = InMemoryTournamentStore(registered_user_ids={organizer_id, member_id})
    tournament = await seed_tournament(store, created_by=organizer_id, max_participants=2)
    publisher = RecordingPublisher()
    coordinator = _coordinator(store, publisher=publisher)

    with pytest.raises(ProfileRequiredError):
        await coordinator.join_by_tournament(
            user_id=uuid4(),
            tournament_id=tournament.tournament_id,
        )

    assert await store.count_memberships(tournament.tournament_id) == 0
    assert publisher.events == []
    result = await asyncio.wait_for(
        coordinator.join_by_tournament(user_id=member_id, tournament_id=tournament.tournament_id),
        timeout=1.0,
    )
    assert result.participants_total == 1


@pytest.mark.asyncio
async def test_joins_for_unknown_tournaments_leave_no_locks_behind() -> None:
    store = InMemoryTournamentStore()
    tournament = await seed_tournament(store)
    coordinator = _coordinator(store)

    for _ in range(3):
        with pytest.raises(TournamentNotFoundError):
            await coordinator.join_by_tournament(user_id=uuid4(), tournament_id=uuid4())

    assert list(store._locks) == [tournament.tournament_id]
