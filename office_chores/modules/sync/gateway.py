"""
Remote data gateway used by the sync store.

The store only depends on the protocols below; SupabaseGateway is the
production implementation backed by PostgREST tables and Realtime channels.
"""

from supabase import AsyncClient
from typing import Any, Callable, Dict, List, Protocol
from datetime import date
import logging

from office_chores.config.settings import settings
from office_chores.modules.chores.schemas import Chore, ChoreCreate, ChoreUpdate
from office_chores.modules.chores.service import ChoreService, TABLE as CHORES_TABLE, chore_from_row
from office_chores.modules.completions.schemas import CompletionCreate, CompletionRecord
from office_chores.modules.completions.service import CompletionService, TABLE as COMPLETIONS_TABLE, completion_from_row
from office_chores.modules.members.schemas import TeamMember, TeamMemberCreate
from office_chores.modules.members.service import MemberService, TABLE as MEMBERS_TABLE, member_from_row
from office_chores.modules.sync.events import ChangeKind, Collection, decode_realtime_payload

logger = logging.getLogger(__name__)

OnChange = Callable[[ChangeKind, Dict[str, Any]], None]


class MemberGateway(Protocol):
    async def fetch_all(self) -> List[TeamMember]: ...
    async def insert(self, member_data: TeamMemberCreate) -> TeamMember: ...
    async def delete_by_id(self, member_id: str) -> None: ...


class ChoreGateway(Protocol):
    async def fetch_all(self) -> List[Chore]: ...
    async def insert(self, chore_data: ChoreCreate) -> Chore: ...
    async def update(self, chore_id: str, chore_data: ChoreUpdate) -> Chore: ...
    async def delete_by_id(self, chore_id: str) -> None: ...


class CompletionGateway(Protocol):
    async def fetch_all(self) -> List[CompletionRecord]: ...
    async def insert(self, completion_data: CompletionCreate) -> CompletionRecord: ...
    async def delete_by_composite_key(self, chore_id: str, occurrence_date: date) -> None: ...


class RemoteDataGateway(Protocol):
    members: MemberGateway
    chores: ChoreGateway
    completions: CompletionGateway

    async def subscribe(self, collection: Collection, on_change: OnChange) -> Any: ...
    async def unsubscribe(self, handle: Any) -> None: ...


TABLES = {
    Collection.MEMBERS: MEMBERS_TABLE,
    Collection.CHORES: CHORES_TABLE,
    Collection.COMPLETIONS: COMPLETIONS_TABLE,
}

ROW_DECODERS = {
    Collection.MEMBERS: member_from_row,
    Collection.CHORES: chore_from_row,
    Collection.COMPLETIONS: completion_from_row,
}


def normalize_row(collection: Collection, kind: ChangeKind, row: Dict[str, Any]) -> Dict[str, Any]:
    """
    Translate a pushed table row the same way fetched rows are translated.

    Deletes keep only the stringified id. Rows the decoder rejects are passed
    through unchanged and left for the store to discard.
    """
    collection = Collection(collection)
    if kind == ChangeKind.DELETE:
        return {"id": str(row["id"])} if row.get("id") is not None else {}
    if not row:
        return {}
    try:
        entity = ROW_DECODERS[collection](row)
    except (KeyError, TypeError, ValueError) as e:
        logger.warning(f"Could not decode pushed {collection.value} row: {e}")
        return dict(row)
    return entity.model_dump(mode="json", by_alias=True)


class SupabaseGateway:
    def __init__(self, supabase: AsyncClient):
        self.supabase = supabase
        self.members = MemberService(supabase)
        self.chores = ChoreService(supabase)
        self.completions = CompletionService(supabase)

    async def subscribe(self, collection: Collection, on_change: OnChange):
        """Open one realtime channel for a table; returns the channel as handle"""
        collection = Collection(collection)
        table = TABLES[collection]

        def handle_payload(payload: Dict[str, Any]):
            kind, row = decode_realtime_payload(payload)
            logger.debug(f"Realtime {kind.value} on {table}")
            on_change(kind, normalize_row(collection, kind, row))

        channel = self.supabase.channel(f"{table}-changes")
        channel.on_postgres_changes(
            "*",
            schema=settings.supabase_schema,
            table=table,
            callback=handle_payload,
        )
        await channel.subscribe()
        logger.info(f"Subscribed to realtime changes on {table}")
        return channel

    async def unsubscribe(self, handle) -> None:
        await self.supabase.remove_channel(handle)
