"""
Optimistic sync store: the in-memory cache of members, chores and
completions shared by every reader.

Mutators apply their change synchronously, before returning, and hand back
an asyncio.Task that performs the remote call. On success the task swaps in
the server's canonical entity and resolves to it (True for deletions); on
failure it restores the snapshot taken just before the change, records a
short error message and resolves to None. Gateway failures never
propagate to callers.

Rapid successive mutations of the same entity are not queued: a later
mutation's snapshot may include an earlier, still-pending change, so its
rollback can resurrect or drop that change. This is accepted for a
small-team cache.
"""

import asyncio
import logging
from datetime import date
from functools import partial
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Set, Tuple

from office_chores.core.exceptions import FetchFailure, MutationFailure
from office_chores.modules.calendar.expansion import DateLike, expand_chores
from office_chores.modules.calendar.schemas import ChoreCalendarEvent
from office_chores.modules.chores.schemas import Chore, ChoreCreate, ChoreUpdate
from office_chores.modules.completions.schemas import CompletionCreate, CompletionRecord
from office_chores.modules.members.colors import next_available_color
from office_chores.modules.members.schemas import TeamMember, TeamMemberCreate
from office_chores.modules.sync import reconcile
from office_chores.modules.sync.events import ChangeEvent, ChangeKind, Collection
from office_chores.modules.sync.gateway import RemoteDataGateway
from office_chores.modules.sync.mutations import MutationKind, PendingMutation
from office_chores.modules.sync.state import StateContainer, StoreState

logger = logging.getLogger(__name__)


class SyncStore:
    def __init__(self, gateway: RemoteDataGateway, container: Optional[StateContainer] = None):
        self.gateway = gateway
        self.container = container or StateContainer()
        self._subscriptions: List[Any] = []
        self._pending: Dict[str, PendingMutation] = {}
        self._tasks: Set[asyncio.Task] = set()
        self._refetches: Set[asyncio.Task] = set()
        self._recording: Dict[str, asyncio.Task] = {}  # placeholder id -> insert task
        self._closed = False

    @property
    def state(self) -> StoreState:
        return self.container.state

    @property
    def pending(self) -> Tuple[PendingMutation, ...]:
        return tuple(self._pending.values())

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def initialize(self) -> bool:
        """Load all three collections at once, then subscribe to remote changes"""
        self.container.apply(is_loading=True, error=None)
        try:
            members, chores, completions = await asyncio.gather(
                self.gateway.members.fetch_all(),
                self.gateway.chores.fetch_all(),
                self.gateway.completions.fetch_all(),
            )
        except Exception as e:
            failure = FetchFailure(e)
            logger.error(f"{failure}: {e}")
            self.container.apply(
                members=(), chores=(), completions=(), is_loading=False, error=str(failure)
            )
            return False

        self.container.apply(
            members=members, chores=chores, completions=completions, is_loading=False, error=None
        )
        logger.info(
            f"Loaded {len(members)} member(s), {len(chores)} chore(s), "
            f"{len(completions)} completion(s)"
        )
        await self._subscribe_all()
        return True

    async def _subscribe_all(self) -> None:
        for collection in Collection:
            try:
                handle = await self.gateway.subscribe(
                    collection, partial(self.handle_change, collection)
                )
                self._subscriptions.append(handle)
            except Exception as e:
                logger.error(f"Error subscribing to {collection.value} changes: {e}")

    async def close(self) -> None:
        """Release subscriptions; outstanding requests resolve unobserved"""
        self._closed = True
        for task in list(self._refetches):
            task.cancel()
        subscriptions, self._subscriptions = self._subscriptions, []
        for handle in subscriptions:
            try:
                await self.gateway.unsubscribe(handle)
            except Exception as e:
                logger.warning(f"Error releasing subscription: {e}")

    def dismiss_error(self) -> None:
        if self.state.error is not None:
            self.container.apply(error=None)

    # ------------------------------------------------------------------
    # Mutation plumbing
    # ------------------------------------------------------------------

    def _begin(self, kind: MutationKind, key: str, affected: Iterable[str], **changes) -> PendingMutation:
        snapshot = {name: getattr(self.state, name) for name in affected}
        mutation = PendingMutation(kind=kind, key=key, snapshot=snapshot)
        self._pending[mutation.token] = mutation
        self.container.apply(**changes)
        return mutation

    def _spawn(self, coro: Awaitable) -> asyncio.Task:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _settle(
        self,
        mutation: PendingMutation,
        request: Awaitable,
        on_success: Optional[Callable[[Any], None]] = None,
    ):
        try:
            result = await request
        except Exception as e:
            self._pending.pop(mutation.token, None)
            if not self._closed:
                self._rollback(mutation, e)
            return None

        self._pending.pop(mutation.token, None)
        if not self._closed and on_success is not None:
            on_success(result)
        # deletions resolve to True so callers can tell them from a rollback
        return True if result is None else result

    def _rollback(self, mutation: PendingMutation, cause: BaseException) -> None:
        failure = MutationFailure(mutation.kind, cause)
        logger.error(f"{failure} ({mutation.key}): {cause}")
        self.container.apply(error=failure.message, **mutation.snapshot)
        logger.debug(f"Rolled back {mutation.kind.value} on {', '.join(mutation.snapshot)}")

    @staticmethod
    async def _resolved(value):
        return value

    # ------------------------------------------------------------------
    # Members
    # ------------------------------------------------------------------

    def add_member(self, member_data: TeamMemberCreate) -> asyncio.Task:
        color = member_data.color or next_available_color(m.color for m in self.state.members)
        member_data = member_data.model_copy(update={"color": color})
        placeholder = TeamMember(id=reconcile.temp_id(), name=member_data.name, color=color)

        mutation = self._begin(
            MutationKind.ADD_MEMBER, placeholder.id, ["members"],
            members=reconcile.append(self.state.members, placeholder),
        )

        def confirm(member: TeamMember):
            self.container.apply(members=reconcile.swap_by_id(self.state.members, placeholder.id, member))

        return self._spawn(self._settle(mutation, self.gateway.members.insert(member_data), confirm))

    def remove_member(self, member_id: str) -> asyncio.Task:
        """Remove a member and unassign every chore they were assigned to"""
        mutation = self._begin(
            MutationKind.REMOVE_MEMBER, member_id, ["members", "chores"],
            members=reconcile.remove_by_id(self.state.members, member_id),
            chores=reconcile.unassign_member(self.state.chores, member_id),
        )
        return self._spawn(self._settle(mutation, self.gateway.members.delete_by_id(member_id)))

    # ------------------------------------------------------------------
    # Chores
    # ------------------------------------------------------------------

    def add_chore(self, chore_data: ChoreCreate) -> asyncio.Task:
        placeholder = Chore(
            id=reconcile.temp_id(),
            title=chore_data.title,
            description=chore_data.description,
            assignee_id=chore_data.assignee_id,
            start_date=chore_data.start_date,
            recurrence=chore_data.recurrence,
        )

        mutation = self._begin(
            MutationKind.ADD_CHORE, placeholder.id, ["chores"],
            chores=reconcile.append(self.state.chores, placeholder),
        )

        def confirm(chore: Chore):
            self.container.apply(chores=reconcile.swap_by_id(self.state.chores, placeholder.id, chore))

        return self._spawn(self._settle(mutation, self.gateway.chores.insert(chore_data), confirm))

    def update_chore(self, chore_id: str, chore_data: ChoreUpdate) -> asyncio.Task:
        changes = chore_data.changes()
        chores = tuple(
            chore.model_copy(update=changes) if chore.id == chore_id else chore
            for chore in self.state.chores
        )
        mutation = self._begin(MutationKind.UPDATE_CHORE, chore_id, ["chores"], chores=chores)

        def confirm(chore: Chore):
            self.container.apply(chores=reconcile.replace_by_id(self.state.chores, chore))

        return self._spawn(self._settle(mutation, self.gateway.chores.update(chore_id, chore_data), confirm))

    def remove_chore(self, chore_id: str) -> asyncio.Task:
        """Remove a chore together with all of its completions"""
        mutation = self._begin(
            MutationKind.REMOVE_CHORE, chore_id, ["chores", "completions"],
            chores=reconcile.remove_by_id(self.state.chores, chore_id),
            completions=reconcile.drop_completions_for_chore(self.state.completions, chore_id),
        )
        return self._spawn(self._settle(mutation, self.gateway.chores.delete_by_id(chore_id)))

    # ------------------------------------------------------------------
    # Completions
    # ------------------------------------------------------------------

    def record_completion(self, completion_data: CompletionCreate) -> asyncio.Task:
        """
        Mark an occurrence done; a second call for the same occurrence is a no-op.

        While the first insert is in flight, repeat calls share its task and so
        resolve to the confirmed record rather than the placeholder.
        """
        existing = reconcile.find_completion(
            self.state.completions, completion_data.chore_id, completion_data.occurrence_date
        )
        if existing is not None:
            inflight = self._recording.get(existing.id)
            if inflight is not None:
                return inflight
            return self._spawn(self._resolved(existing))

        placeholder = CompletionRecord(id=reconcile.temp_id(), **completion_data.model_dump())
        mutation = self._begin(
            MutationKind.RECORD_COMPLETION, placeholder.id, ["completions"],
            completions=reconcile.append(self.state.completions, placeholder),
        )

        def confirm(completion: CompletionRecord):
            self.container.apply(
                completions=reconcile.swap_by_id(self.state.completions, placeholder.id, completion)
            )

        task = self._spawn(
            self._settle(mutation, self.gateway.completions.insert(completion_data), confirm)
        )
        self._recording[placeholder.id] = task
        task.add_done_callback(lambda _: self._recording.pop(placeholder.id, None))
        return task

    def remove_completion(self, chore_id: str, occurrence_date: date) -> asyncio.Task:
        existing = reconcile.find_completion(self.state.completions, chore_id, occurrence_date)
        if existing is None:
            logger.debug(f"No completion for {chore_id}::{occurrence_date.isoformat()}")
            return self._spawn(self._resolved(False))

        mutation = self._begin(
            MutationKind.REMOVE_COMPLETION, f"{chore_id}::{occurrence_date.isoformat()}", ["completions"],
            completions=reconcile.remove_by_id(self.state.completions, existing.id),
        )
        return self._spawn(self._settle(
            mutation, self.gateway.completions.delete_by_composite_key(chore_id, occurrence_date)
        ))

    def toggle_completion(self, chore_id: str, occurrence_date: date, member_id: str) -> asyncio.Task:
        if reconcile.find_completion(self.state.completions, chore_id, occurrence_date):
            return self.remove_completion(chore_id, occurrence_date)
        return self.record_completion(CompletionCreate(
            chore_id=chore_id, occurrence_date=occurrence_date, completed_by_id=member_id
        ))

    # ------------------------------------------------------------------
    # Remote merge
    # ------------------------------------------------------------------

    def handle_change(self, collection: Collection, kind: ChangeKind, payload: Dict[str, Any]) -> None:
        """Gateway push callback. Members and chores refetch; completions merge as deltas."""
        if self._closed:
            return
        event = ChangeEvent(collection=collection, kind=kind, payload=payload or {})

        if event.collection != Collection.COMPLETIONS:
            task = asyncio.create_task(self.refetch(event.collection))
            self._refetches.add(task)
            task.add_done_callback(self._refetches.discard)
            return

        try:
            merged = reconcile.reduce_completion_event(self.state, event)
        except Exception as e:
            logger.warning(f"Ignoring undecodable completion {kind.value} event: {e}")
            return
        if merged is not self.state:
            logger.debug(f"Merged remote completion {event.kind.value} {event.row_id}")
            self.container.apply(completions=merged.completions)

    async def refetch(self, collection: Collection) -> None:
        """Replace members or chores wholesale with the remote copy"""
        collection = Collection(collection)
        source = {
            Collection.MEMBERS: self.gateway.members,
            Collection.CHORES: self.gateway.chores,
            Collection.COMPLETIONS: self.gateway.completions,
        }[collection]
        try:
            items = await source.fetch_all()
        except Exception as e:
            logger.error(f"Error refetching {collection.value}: {e}")
            return
        if self._closed:
            return
        self.container.apply(**{collection.value: items})
        logger.debug(f"Refetched {len(items)} {collection.value}")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def events_between(self, range_start: DateLike, range_end: DateLike) -> List[ChoreCalendarEvent]:
        state = self.state
        return expand_chores(state.chores, state.members, state.completions, range_start, range_end)

    def assigned_chore_count(self, member_id: str) -> int:
        return sum(1 for chore in self.state.chores if chore.assignee_id == member_id)

    def completion_history(
        self, member_id: Optional[str] = None, chore_id: Optional[str] = None
    ) -> List[CompletionRecord]:
        """Completions, optionally filtered, most recently completed first"""
        history = [
            c for c in self.state.completions
            if (not member_id or c.completed_by_id == member_id)
            and (not chore_id or c.chore_id == chore_id)
        ]
        return sorted(history, key=lambda c: c.completed_at, reverse=True)
