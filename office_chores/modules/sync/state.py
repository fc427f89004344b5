"""
Versioned, owned state container for the sync store.

State is an immutable snapshot; every change replaces whole fields, so a
reader holding a snapshot always sees a complete pre- or post-mutation value.
"""

from pydantic import BaseModel
from typing import Callable, List, Optional, Tuple
import logging

from office_chores.modules.chores.schemas import Chore
from office_chores.modules.completions.schemas import CompletionRecord
from office_chores.modules.members.schemas import TeamMember

logger = logging.getLogger(__name__)

Listener = Callable[["StoreState"], None]


class StoreState(BaseModel):
    members: Tuple[TeamMember, ...] = ()
    chores: Tuple[Chore, ...] = ()
    completions: Tuple[CompletionRecord, ...] = ()
    is_loading: bool = True
    error: Optional[str] = None
    version: int = 0

    class Config:
        frozen = True


class StateContainer:
    def __init__(self, initial: Optional[StoreState] = None):
        self._state = initial or StoreState()
        self._listeners: List[Listener] = []

    @property
    def state(self) -> StoreState:
        return self._state

    @property
    def version(self) -> int:
        return self._state.version

    def apply(self, **changes) -> StoreState:
        """Replace the given fields wholesale and publish the new snapshot"""
        for name in ("members", "chores", "completions"):
            if name in changes:
                changes[name] = tuple(changes[name])
        changes["version"] = self._state.version + 1
        self._state = self._state.model_copy(update=changes)
        for listener in list(self._listeners):
            try:
                listener(self._state)
            except Exception as e:
                logger.error(f"State listener failed: {e}")
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe
