"""Shared fixtures: an in-memory remote data gateway and sample team data."""

# pylint: disable=redefined-outer-name

import asyncio
from datetime import date, datetime, timezone
from typing import Any, Callable, Dict, List, Set

import pytest

from office_chores.core.exceptions import GatewayError
from office_chores.modules.chores.schemas import Chore, ChoreCreate, ChoreUpdate, Frequency, RecurrenceRule
from office_chores.modules.completions.schemas import CompletionCreate, CompletionRecord
from office_chores.modules.members.schemas import TeamMember, TeamMemberCreate
from office_chores.modules.sync.events import ChangeKind, Collection
from office_chores.modules.sync.gateway import normalize_row
from office_chores.modules.sync.store import SyncStore


class _FakeMembers:
    def __init__(self, gateway: "FakeGateway"):
        self.gateway = gateway

    async def fetch_all(self) -> List[TeamMember]:
        await self.gateway.call("members.fetch_all")
        return list(self.gateway.rows["members"])

    async def insert(self, member_data: TeamMemberCreate) -> TeamMember:
        await self.gateway.call("members.insert")
        member = TeamMember(id=self.gateway.next_id("member"), name=member_data.name, color=member_data.color)
        self.gateway.rows["members"].append(member)
        return member

    async def delete_by_id(self, member_id: str) -> None:
        await self.gateway.call("members.delete_by_id")
        self.gateway.rows["members"] = [m for m in self.gateway.rows["members"] if m.id != member_id]


class _FakeChores:
    def __init__(self, gateway: "FakeGateway"):
        self.gateway = gateway

    async def fetch_all(self) -> List[Chore]:
        await self.gateway.call("chores.fetch_all")
        return list(self.gateway.rows["chores"])

    async def insert(self, chore_data: ChoreCreate) -> Chore:
        await self.gateway.call("chores.insert")
        chore = Chore(id=self.gateway.next_id("chore"), **dict(chore_data))
        self.gateway.rows["chores"].append(chore)
        return chore

    async def update(self, chore_id: str, chore_data: ChoreUpdate) -> Chore:
        await self.gateway.call("chores.update")
        for index, chore in enumerate(self.gateway.rows["chores"]):
            if chore.id == chore_id:
                updated = chore.model_copy(update=chore_data.changes())
                self.gateway.rows["chores"][index] = updated
                return updated
        raise GatewayError(f"Chore {chore_id} not found")

    async def delete_by_id(self, chore_id: str) -> None:
        await self.gateway.call("chores.delete_by_id")
        self.gateway.rows["chores"] = [c for c in self.gateway.rows["chores"] if c.id != chore_id]


class _FakeCompletions:
    def __init__(self, gateway: "FakeGateway"):
        self.gateway = gateway

    async def fetch_all(self) -> List[CompletionRecord]:
        await self.gateway.call("completions.fetch_all")
        return sorted(self.gateway.rows["completions"], key=lambda c: c.completed_at, reverse=True)

    async def insert(self, completion_data: CompletionCreate) -> CompletionRecord:
        await self.gateway.call("completions.insert")
        record = CompletionRecord(id=self.gateway.next_id("completion"), **completion_data.model_dump())
        self.gateway.rows["completions"].append(record)
        return record

    async def delete_by_composite_key(self, chore_id: str, occurrence_date: date) -> None:
        await self.gateway.call("completions.delete_by_composite_key")
        self.gateway.rows["completions"] = [
            c for c in self.gateway.rows["completions"]
            if not (c.chore_id == chore_id and c.occurrence_date == occurrence_date)
        ]


class FakeGateway:
    """In-memory stand-in for the Supabase gateway.

    fail(op) makes every later call of op raise; hold(op) returns an
    asyncio.Event the call waits on, to control resolution order.
    """

    def __init__(self, members=(), chores=(), completions=()):
        self.rows: Dict[str, list] = {
            "members": list(members),
            "chores": list(chores),
            "completions": list(completions),
        }
        self.members = _FakeMembers(self)
        self.chores = _FakeChores(self)
        self.completions = _FakeCompletions(self)
        self.calls: List[str] = []
        self.failures: Set[str] = set()
        self.gates: Dict[str, asyncio.Event] = {}
        self.subscriptions: Dict[Collection, Callable] = {}
        self.unsubscribed: List[Any] = []
        self._counter = 0

    def next_id(self, prefix: str) -> str:
        self._counter += 1
        return f"{prefix}-{self._counter}"

    def fail(self, op: str) -> None:
        self.failures.add(op)

    def hold(self, op: str) -> asyncio.Event:
        gate = asyncio.Event()
        self.gates[op] = gate
        return gate

    async def call(self, op: str) -> None:
        self.calls.append(op)
        gate = self.gates.get(op)
        if gate is not None:
            await gate.wait()
        if op in self.failures:
            raise GatewayError(f"{op} rejected")

    async def subscribe(self, collection: Collection, on_change):
        self.subscriptions[collection] = on_change
        return collection

    async def unsubscribe(self, handle) -> None:
        self.subscriptions.pop(handle, None)
        self.unsubscribed.append(handle)

    def push(self, collection: Collection, kind: ChangeKind, payload: Dict[str, Any]) -> None:
        """Deliver a table row to the subscriber, translated as SupabaseGateway does"""
        self.subscriptions[collection](kind, normalize_row(collection, kind, payload))


async def settle() -> None:
    """Let scheduled store tasks run up to their next suspension point"""
    for _ in range(5):
        await asyncio.sleep(0)


ALICE = TeamMember(id="m-alice", name="Alice", color="#3B82F6")
BOB = TeamMember(id="m-bob", name="Bob", color="#10B981")

WEEKLY_TRASH = Chore(
    id="c-trash",
    title="Take out trash",
    assignee_id=ALICE.id,
    start_date=date(2024, 1, 1),  # Monday
    recurrence=RecurrenceRule(frequency=Frequency.WEEKLY, interval=1, days_of_week=[1]),
)
FRIDGE = Chore(
    id="c-fridge",
    title="Clean fridge",
    assignee_id=BOB.id,
    start_date=date(2024, 1, 5),
)
PLANTS = Chore(
    id="c-plants",
    title="Water plants",
    assignee_id=ALICE.id,
    start_date=date(2024, 1, 2),
    recurrence=RecurrenceRule(frequency=Frequency.DAILY, interval=3),
)
COFFEE = Chore(
    id="c-coffee",
    title="Descale coffee machine",
    start_date=date(2024, 1, 15),
    recurrence=RecurrenceRule(frequency=Frequency.MONTHLY, interval=1, day_of_month=15),
)


def completion(record_id: str, chore: Chore, day: date, member: TeamMember, hour: int = 9) -> CompletionRecord:
    return CompletionRecord(
        id=record_id,
        chore_id=chore.id,
        occurrence_date=day,
        completed_at=datetime(day.year, day.month, day.day, hour, tzinfo=timezone.utc),
        completed_by_id=member.id,
    )


@pytest.fixture
def members():
    return [ALICE, BOB]


@pytest.fixture
def chores():
    return [WEEKLY_TRASH, FRIDGE, PLANTS, COFFEE]


@pytest.fixture
def completions():
    return [
        completion("done-1", WEEKLY_TRASH, date(2024, 1, 1), ALICE),
        completion("done-2", WEEKLY_TRASH, date(2024, 1, 8), BOB, hour=11),
        completion("done-3", PLANTS, date(2024, 1, 2), ALICE, hour=8),
    ]


@pytest.fixture
def gateway(members, chores, completions):
    return FakeGateway(members=members, chores=chores, completions=completions)


@pytest.fixture
def store(gateway):
    return SyncStore(gateway)
