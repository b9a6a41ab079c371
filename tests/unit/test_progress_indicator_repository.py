"""
Unit Tests: SQL Progress Indicator Repository

Covers the persistence layer against a mocked AsyncSession:
- Insert with store-assigned id and created_at
- Rollback and IndicatorPersistenceError on database failure
- Recent/engagement queries (ordering, limit, filters)
- Row to entity conversion
"""

import pytest
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, Mock
from uuid import uuid4

from sqlalchemy.exc import OperationalError

from coachpath.domain.entities import IndicatorDetail, ProgressIndicator
from coachpath.domain.exceptions import IndicatorPersistenceError
from coachpath.domain.value_objects import IndicatorType
from coachpath.infrastructure.database import ProgressIndicatorModel
from coachpath.infrastructure.repositories import SQLProgressIndicatorRepository


NOW = datetime(2025, 3, 10, 12, 0, tzinfo=timezone.utc)


def make_model(indicator_type="drift", **detail):
    return ProgressIndicatorModel(
        id=uuid4(),
        session_id="session-1",
        engagement_id="eng-1",
        type=indicator_type,
        detail={"rule_index": None, "message": "msg", "reason": "reason", **detail},
        created_at=NOW
    )


def query_result(models):
    """Mock result of session.execute(select(...))"""
    result = Mock()
    result.scalars.return_value.all.return_value = models
    return result


# ============================================================================
# FIXTURES
# ============================================================================

@pytest.fixture
def db_session():
    """Mock AsyncSession; refresh assigns server-side defaults"""
    session = AsyncMock()
    session.add = Mock()

    async def refresh(model):
        model.id = uuid4()
        model.created_at = NOW

    session.refresh = AsyncMock(side_effect=refresh)
    session.execute = AsyncMock(return_value=query_result([]))
    return session


@pytest.fixture
def repository(db_session):
    return SQLProgressIndicatorRepository(db_session)


@pytest.fixture
def indicator():
    return ProgressIndicator.from_keyword_repetition(
        "session-1", ["anxious", "overwhelmed"], engagement_id="eng-1"
    )


# ============================================================================
# CREATE TESTS
# ============================================================================

@pytest.mark.asyncio
async def test_create_persists_flattened_detail(repository, db_session, indicator):
    """
    Test: one row is added with the flattened detail JSON
    """
    stored = await repository.create(indicator)

    db_session.add.assert_called_once()
    model = db_session.add.call_args.args[0]
    assert model.session_id == "session-1"
    assert model.engagement_id == "eng-1"
    assert model.type == "drift"
    assert model.detail == {
        "rule_index": None,
        "message": indicator.detail.message,
        "reason": "Keywords repeated across messages: anxious, overwhelmed",
        "keywords": ["anxious", "overwhelmed"],
    }
    db_session.commit.assert_awaited_once()

    assert stored.is_persisted
    assert stored.created_at == NOW
    assert stored.indicator_type == IndicatorType.DRIFT
    assert stored.detail.extras == {"keywords": ["anxious", "overwhelmed"]}


@pytest.mark.asyncio
async def test_create_failure_rolls_back(repository, db_session, indicator):
    """
    Test: a database error is rolled back and surfaced as a persistence error
    """
    db_session.commit = AsyncMock(
        side_effect=OperationalError("INSERT INTO progress_indicators", {}, Exception("connection lost"))
    )

    with pytest.raises(IndicatorPersistenceError) as exc_info:
        await repository.create(indicator)

    assert exc_info.value.code == "PERSISTENCE_ERROR"
    assert "indicator insert" in exc_info.value.message
    db_session.rollback.assert_awaited_once()


@pytest.mark.asyncio
async def test_create_network_failure_rolls_back(repository, db_session, indicator):
    db_session.commit = AsyncMock(side_effect=ConnectionRefusedError("refused"))

    with pytest.raises(IndicatorPersistenceError):
        await repository.create(indicator)

    db_session.rollback.assert_awaited_once()


# ============================================================================
# QUERY TESTS
# ============================================================================

@pytest.mark.asyncio
async def test_recent_for_session_orders_newest_first(repository, db_session):
    models = [make_model("stall", turns=5), make_model("leap", rule_index=1, pattern="p")]
    db_session.execute = AsyncMock(return_value=query_result(models))

    indicators = await repository.get_recent_for_session("session-1", limit=3)

    stmt = db_session.execute.await_args.args[0]
    sql = str(stmt)
    assert "progress_indicators.session_id = :session_id_1" in sql
    assert "ORDER BY progress_indicators.created_at DESC" in sql
    assert "LIMIT" in sql
    assert stmt.compile().params["param_1"] == 3

    assert [i.indicator_type for i in indicators] == [IndicatorType.STALL, IndicatorType.LEAP]
    assert indicators[0].detail.extras == {"turns": 5}
    assert indicators[1].detail.rule_index == 1
    assert indicators[1].detail.extras == {"pattern": "p"}


@pytest.mark.asyncio
async def test_engagement_since_filters_by_time(repository, db_session):
    since = NOW - timedelta(days=7)

    indicators = await repository.get_for_engagement_since("eng-1", since)

    stmt = db_session.execute.await_args.args[0]
    sql = str(stmt)
    assert "progress_indicators.engagement_id = :engagement_id_1" in sql
    assert "progress_indicators.created_at >= :created_at_1" in sql
    assert stmt.compile().params["created_at_1"] == since
    assert indicators == []


@pytest.mark.asyncio
async def test_query_failure_raises_persistence_error(repository, db_session):
    db_session.execute = AsyncMock(
        side_effect=OperationalError("SELECT", {}, Exception("server closed the connection"))
    )

    with pytest.raises(IndicatorPersistenceError, match="recent indicator query"):
        await repository.get_recent_for_session("session-1")


# ============================================================================
# CONVERSION TESTS
# ============================================================================

def test_detail_round_trip_keeps_extras():
    detail = IndicatorDetail(message="m", reason="r", extras={"avgLength": 20})

    assert IndicatorDetail.from_dict(detail.to_dict()) == detail


def test_detail_from_empty_row():
    detail = IndicatorDetail.from_dict(None)

    assert detail.message == ""
    assert detail.rule_index is None
    assert detail.extras == {}
