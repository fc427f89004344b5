"""
Reconciliation rules shared by local mutations and remote merges.

All helpers are pure: they take collections (tuples) and return new tuples.
Completions are deduplicated in two places:

- record_completion checks the natural key (chore_id, occurrence_date)
  before an optimistic create;
- remote inserts check the server id before appending, since the optimistic
  entry carries a temporary id that only the success-path swap replaces.
"""

from datetime import date
from typing import Iterable, Optional, Tuple, TypeVar
from uuid import uuid4

from office_chores.modules.chores.schemas import Chore
from office_chores.modules.completions.schemas import CompletionRecord
from office_chores.modules.sync.events import ChangeEvent, ChangeKind, Collection
from office_chores.modules.sync.state import StoreState

T = TypeVar("T")

TEMP_ID_PREFIX = "temp-"


def temp_id() -> str:
    return f"{TEMP_ID_PREFIX}{uuid4()}"


def is_temp_id(entity_id: str) -> bool:
    return entity_id.startswith(TEMP_ID_PREFIX)


def contains_id(items: Iterable[T], entity_id: str) -> bool:
    return any(item.id == entity_id for item in items)


def append(items: Tuple[T, ...], item: T) -> Tuple[T, ...]:
    return tuple(items) + (item,)


def remove_by_id(items: Tuple[T, ...], entity_id: str) -> Tuple[T, ...]:
    return tuple(item for item in items if item.id != entity_id)


def replace_by_id(items: Tuple[T, ...], entity: T) -> Tuple[T, ...]:
    return tuple(entity if item.id == entity.id else item for item in items)


def swap_by_id(items: Tuple[T, ...], placeholder_id: str, confirmed: T) -> Tuple[T, ...]:
    """
    Replace the placeholder entry with the confirmed one, keeping its position.

    If the confirmed id is already present (its push notification arrived
    first) the placeholder is dropped instead. A missing placeholder leaves
    the collection unchanged.
    """
    if contains_id(items, confirmed.id):
        return remove_by_id(items, placeholder_id)
    return tuple(confirmed if item.id == placeholder_id else item for item in items)


def find_completion(
    completions: Iterable[CompletionRecord], chore_id: str, occurrence_date: date
) -> Optional[CompletionRecord]:
    for completion in completions:
        if completion.chore_id == chore_id and completion.occurrence_date == occurrence_date:
            return completion
    return None


def drop_completions_for_chore(
    completions: Tuple[CompletionRecord, ...], chore_id: str
) -> Tuple[CompletionRecord, ...]:
    return tuple(c for c in completions if c.chore_id != chore_id)


def unassign_member(chores: Tuple[Chore, ...], member_id: str) -> Tuple[Chore, ...]:
    return tuple(
        chore.model_copy(update={"assignee_id": None}) if chore.assignee_id == member_id else chore
        for chore in chores
    )


def merge_completion_change(
    completions: Tuple[CompletionRecord, ...], kind: ChangeKind, record: Optional[CompletionRecord] = None,
    record_id: Optional[str] = None,
) -> Tuple[CompletionRecord, ...]:
    """Fold one remote completion delta into the collection"""
    if kind == ChangeKind.INSERT and record is not None:
        if contains_id(completions, record.id):
            return completions
        return append(completions, record)
    if kind == ChangeKind.DELETE and record_id is not None:
        if not contains_id(completions, record_id):
            return completions
        return remove_by_id(completions, record_id)
    return completions


def reduce_completion_event(state: StoreState, event: ChangeEvent) -> StoreState:
    """Pure reducer over (state, completion change event) -> state"""
    if event.collection != Collection.COMPLETIONS:
        return state
    record = None
    if event.kind == ChangeKind.INSERT:
        record = CompletionRecord.model_validate(event.payload)
    completions = merge_completion_change(
        state.completions, event.kind, record=record, record_id=event.row_id
    )
    if completions is state.completions:
        return state
    return state.model_copy(update={"completions": completions, "version": state.version + 1})
