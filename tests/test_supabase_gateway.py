"""Supabase-backed services: row translation, query building and realtime wiring."""

from datetime import date, datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from office_chores.core.exceptions import GatewayError
from office_chores.modules.chores.schemas import ChoreCreate, ChoreUpdate, Frequency, RecurrenceRule
from office_chores.modules.chores.service import ChoreService, chore_from_row
from office_chores.modules.completions.schemas import CompletionCreate
from office_chores.modules.completions.service import CompletionService
from office_chores.modules.members.schemas import TeamMemberCreate
from office_chores.modules.members.service import MemberService
from office_chores.modules.sync.events import ChangeKind, Collection
from office_chores.modules.sync.gateway import SupabaseGateway

CHORE_ROW = {
    "id": "c-1",
    "title": "Water plants",
    "description": None,
    "assignee_id": "m-1",
    "start_date": "2024-01-02",
    "recurrence": {"frequency": "weekly", "interval": 2, "daysOfWeek": [1, 3]},
    "created_at": "2024-01-01T00:00:00+00:00",
}


def _client(data):
    """Supabase client mock whose query builder chains and resolves to data"""
    query = MagicMock()
    for name in ("select", "order", "insert", "update", "delete", "eq"):
        getattr(query, name).return_value = query
    query.execute = AsyncMock(return_value=MagicMock(data=data))
    client = MagicMock()
    client.table.return_value = query
    return client, query


def test_chore_row_translation():
    chore = chore_from_row(CHORE_ROW)
    assert chore.assignee_id == "m-1"
    assert chore.start_date == date(2024, 1, 2)
    assert chore.recurrence.frequency == Frequency.WEEKLY
    assert chore.recurrence.days_of_week == [1, 3]
    assert chore_from_row({**CHORE_ROW, "recurrence": None, "assignee_id": None}).recurrence is None


@pytest.mark.asyncio
async def test_member_fetch_orders_by_creation():
    client, query = _client([{"id": "m-1", "name": "Alice", "color": "#3B82F6", "created_at": "x"}])

    members = await MemberService(client).fetch_all()

    client.table.assert_called_with("team_members")
    query.order.assert_called_with("created_at")
    assert members[0].name == "Alice"


@pytest.mark.asyncio
async def test_member_insert_without_row_raises():
    client, _ = _client([])
    with pytest.raises(GatewayError):
        await MemberService(client).insert(TeamMemberCreate(name="Alice", color="#3B82F6"))


@pytest.mark.asyncio
async def test_chore_insert_writes_snake_case_columns():
    client, query = _client([CHORE_ROW])
    chore_data = ChoreCreate(
        title="Water plants",
        assignee_id="m-1",
        start_date=date(2024, 1, 2),
        recurrence=RecurrenceRule(frequency=Frequency.WEEKLY, interval=2, days_of_week=[3, 1]),
    )

    chore = await ChoreService(client).insert(chore_data)

    query.insert.assert_called_once_with({
        "title": "Water plants",
        "description": None,
        "assignee_id": "m-1",
        "start_date": "2024-01-02",
        "recurrence": {"frequency": "weekly", "interval": 2, "daysOfWeek": [1, 3]},
    })
    assert chore.id == "c-1"


@pytest.mark.asyncio
async def test_chore_update_sends_only_given_fields():
    client, query = _client([CHORE_ROW])

    await ChoreService(client).update("c-1", ChoreUpdate(assignee_id=None, recurrence=None))

    query.update.assert_called_once_with({"assignee_id": None, "recurrence": None})
    query.eq.assert_called_with("id", "c-1")


@pytest.mark.asyncio
async def test_completion_fetch_is_newest_first_and_delete_uses_composite_key():
    row = {
        "id": "done-1",
        "chore_id": "c-1",
        "occurrence_date": "2024-01-02",
        "completed_at": "2024-01-02T09:00:00+00:00",
        "completed_by_id": "m-1",
    }
    client, query = _client([row])
    service = CompletionService(client)

    records = await service.fetch_all()
    query.order.assert_called_with("completed_at", desc=True)
    assert records[0].occurrence_date == date(2024, 1, 2)

    await service.delete_by_composite_key("c-1", date(2024, 1, 2))
    query.eq.assert_any_call("chore_id", "c-1")
    query.eq.assert_any_call("occurrence_date", "2024-01-02")


@pytest.mark.asyncio
async def test_completion_insert_serializes_dates():
    row = {
        "id": "done-1",
        "chore_id": "c-1",
        "occurrence_date": "2024-01-02",
        "completed_at": "2024-01-02T09:00:00+00:00",
        "completed_by_id": "m-1",
    }
    client, query = _client([row])
    data = CompletionCreate(
        chore_id="c-1",
        occurrence_date=date(2024, 1, 2),
        completed_by_id="m-1",
        completed_at=datetime(2024, 1, 2, 9, tzinfo=timezone.utc),
    )

    record = await CompletionService(client).insert(data)

    sent = query.insert.call_args[0][0]
    assert sent["occurrence_date"] == "2024-01-02"
    assert sent["completed_at"] == "2024-01-02T09:00:00+00:00"
    assert record.id == "done-1"


@pytest.mark.asyncio
async def test_subscribe_decodes_realtime_payloads():
    client = MagicMock()
    channel = MagicMock()
    channel.subscribe = AsyncMock()
    client.channel.return_value = channel
    client.remove_channel = AsyncMock()
    received = []

    gateway = SupabaseGateway(client)
    handle = await gateway.subscribe(Collection.COMPLETIONS, lambda kind, row: received.append((kind, row)))

    client.channel.assert_called_once_with("completions-changes")
    kwargs = channel.on_postgres_changes.call_args.kwargs
    assert kwargs["table"] == "completions"
    kwargs["callback"]({"data": {"type": "DELETE", "old_record": {"id": "done-1"}}})
    assert received == [(ChangeKind.DELETE, {"id": "done-1"})]

    await gateway.unsubscribe(handle)
    client.remove_channel.assert_awaited_once_with(channel)


@pytest.mark.asyncio
async def test_subscribe_translates_pushed_rows_like_fetched_rows():
    client = MagicMock()
    channel = MagicMock()
    channel.subscribe = AsyncMock()
    client.channel.return_value = channel
    received = []

    await SupabaseGateway(client).subscribe(Collection.COMPLETIONS, lambda kind, row: received.append((kind, row)))
    callback = channel.on_postgres_changes.call_args.kwargs["callback"]
    callback({"data": {"type": "INSERT", "record": {
        "id": 42,
        "chore_id": 7,
        "occurrence_date": "2024-01-02",
        "completed_at": "2024-01-02T09:00:00+00:00",
        "completed_by_id": 3,
    }}})
    callback({"data": {"type": "DELETE", "old_record": {"id": 42}}})

    (insert_kind, inserted), (delete_kind, deleted) = received
    assert insert_kind == ChangeKind.INSERT
    assert (inserted["id"], inserted["chore_id"], inserted["completed_by_id"]) == ("42", "7", "3")
    assert inserted["occurrence_date"] == "2024-01-02"
    assert delete_kind == ChangeKind.DELETE
    assert deleted == {"id": "42"}
