"""Repository tests for the append-only label event log on SQLite."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from datetime import UTC, datetime

import pytest
from sqlalchemy import create_engine, func, select
from sqlalchemy.pool import StaticPool

from resources.substrates.postgres import SessionProvider, create_session_factory
from services.state.label_ledger.data.repository import (
    SqlLabelEventRepository,
    fold_active_labels,
)
from services.state.label_ledger.data.schema import label_events, metadata
from services.state.label_ledger.domain import AppendStatus, LabelEvent

_SOURCE = "did:plc:labeler"


def _event(event_id: int, value: str, *, negate: bool = False) -> LabelEvent:
    return LabelEvent(
        id=event_id,
        source=_SOURCE,
        subject="did:plc:alice",
        value=value,
        negate=negate,
        created_at=datetime(2026, 10, 19, tzinfo=UTC),
    )


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def repository(engine) -> SqlLabelEventRepository:
    return SqlLabelEventRepository(
        SessionProvider(session_factory=create_session_factory(engine))
    )


def _row_count(engine) -> int:
    with engine.connect() as conn:
        return int(conn.execute(select(func.count()).select_from(label_events)).scalar_one())


def test_fold_adds_grants_and_removes_revocations_in_order() -> None:
    """Fold should apply grants and revocations in insertion order."""
    events = [
        _event(1, "a"),
        _event(2, "b"),
        _event(3, "a", negate=True),
        _event(4, "c"),
    ]

    assert fold_active_labels(events) == ("b", "c")


def test_fold_is_order_sensitive() -> None:
    """Revoke-then-grant and grant-then-revoke should fold differently."""
    grant_last = [_event(1, "a", negate=True), _event(2, "a")]
    revoke_last = [_event(1, "a"), _event(2, "a", negate=True)]

    assert fold_active_labels(grant_last) == ("a",)
    assert fold_active_labels(revoke_last) == ()
    assert fold_active_labels(grant_last) == fold_active_labels(list(grant_last))


def test_append_if_below_cap_appends_until_cap(repository) -> None:
    """Grants should append while the active set is below the cap."""
    statuses = [
        repository.append_if_below_cap(
            subject="did:plc:alice", value=value, source=_SOURCE, max_labels=2
        ).status
        for value in ("one", "two", "three")
    ]

    assert statuses == [
        AppendStatus.APPENDED,
        AppendStatus.APPENDED,
        AppendStatus.CAP_REACHED,
    ]
    values = [event.value for event in repository.list_events(subject="did:plc:alice")]
    assert values == ["one", "two"]


def test_append_if_below_cap_reports_already_active_without_writing(
    engine, repository
) -> None:
    """Re-granting an active value should not append a new event."""
    repository.append_if_below_cap(
        subject="did:plc:alice", value="one", source=_SOURCE, max_labels=1
    )

    result = repository.append_if_below_cap(
        subject="did:plc:alice", value="one", source=_SOURCE, max_labels=1
    )

    assert result.status is AppendStatus.ALREADY_ACTIVE
    assert result.active == ("one",)
    assert _row_count(engine) == 1


def test_append_revocations_negates_every_active_value(engine, repository) -> None:
    """Reset should append one negation per active value and never delete."""
    for value in ("one", "two"):
        repository.append_if_below_cap(
            subject="did:plc:alice", value=value, source=_SOURCE, max_labels=4
        )
    repository.append_if_below_cap(
        subject="did:plc:bob", value="one", source=_SOURCE, max_labels=4
    )

    revoked = repository.append_revocations(subject="did:plc:alice", source=_SOURCE)

    assert revoked == ("one", "two")
    assert _row_count(engine) == 5
    events = repository.list_events(subject="did:plc:alice")
    assert fold_active_labels(events) == ()
    assert [event.negate for event in events] == [False, False, True, True]
    assert fold_active_labels(repository.list_events(subject="did:plc:bob")) == ("one",)


def test_append_revocations_with_nothing_active_appends_nothing(
    engine, repository
) -> None:
    """Reset on an empty active set should be a no-op."""
    assert repository.append_revocations(subject="did:plc:alice", source=_SOURCE) == ()
    assert _row_count(engine) == 0


def test_list_events_maps_columns_to_domain(repository) -> None:
    """Rows should map back with UTC timestamps and label column names."""
    repository.append_if_below_cap(
        subject="did:plc:alice", value="one", source=_SOURCE, max_labels=4
    )

    (event,) = repository.list_events(subject="did:plc:alice")

    assert event.source == _SOURCE
    assert event.subject == "did:plc:alice"
    assert event.value == "one"
    assert event.negate is False
    assert event.created_at.tzinfo == UTC


def test_concurrent_grants_never_exceed_cap(tmp_path) -> None:
    """Parallel grants for one subject should stop exactly at the cap."""
    engine = create_engine(f"sqlite+pysqlite:///{tmp_path / 'ledger.db'}")
    metadata.create_all(engine)
    repository = SqlLabelEventRepository(
        SessionProvider(session_factory=create_session_factory(engine))
    )

    def _grant(index: int) -> AppendStatus:
        return repository.append_if_below_cap(
            subject="did:plc:alice",
            value=f"label-{'x' * index}",
            source=_SOURCE,
            max_labels=4,
        ).status

    with ThreadPoolExecutor(max_workers=8) as pool:
        statuses = list(pool.map(_grant, range(1, 13)))

    assert statuses.count(AppendStatus.APPENDED) == 4
    assert statuses.count(AppendStatus.CAP_REACHED) == 8
    assert len(fold_active_labels(repository.list_events(subject="did:plc:alice"))) == 4
    engine.dispose()
