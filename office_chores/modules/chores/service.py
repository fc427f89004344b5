from supabase import AsyncClient
from office_chores.core.exceptions import GatewayError
from office_chores.modules.chores.schemas import Chore, ChoreCreate, ChoreUpdate, RecurrenceRule
from typing import Any, Dict, List, Optional
import logging

logger = logging.getLogger(__name__)

TABLE = "chores"


def chore_from_row(row: Dict[str, Any]) -> Chore:
    recurrence = row.get("recurrence")
    return Chore(
        id=str(row["id"]),
        title=row["title"],
        description=row.get("description") or None,
        assignee_id=str(row["assignee_id"]) if row.get("assignee_id") else None,
        start_date=row["start_date"],
        recurrence=RecurrenceRule.model_validate(recurrence) if recurrence else None,
    )


def _recurrence_to_row(rule: Optional[RecurrenceRule]) -> Optional[Dict[str, Any]]:
    return rule.to_json() if rule is not None else None


def changes_to_row(changes: Dict[str, Any]) -> Dict[str, Any]:
    """Translate a ChoreUpdate.changes() dict into a column patch"""
    patch = {}
    if "title" in changes:
        patch["title"] = changes["title"]
    if "description" in changes:
        patch["description"] = changes["description"]
    if "assignee_id" in changes:
        patch["assignee_id"] = changes["assignee_id"]
    if "start_date" in changes:
        patch["start_date"] = changes["start_date"].isoformat()
    if "recurrence" in changes:
        patch["recurrence"] = _recurrence_to_row(changes["recurrence"])
    return patch


class ChoreService:
    def __init__(self, supabase: AsyncClient):
        self.supabase = supabase

    async def fetch_all(self) -> List[Chore]:
        """All chores, oldest first"""
        result = await self.supabase.table(TABLE)\
            .select("*")\
            .order("created_at")\
            .execute()
        return [chore_from_row(row) for row in (result.data or [])]

    async def insert(self, chore_data: ChoreCreate) -> Chore:
        result = await self.supabase.table(TABLE).insert({
            "title": chore_data.title,
            "description": chore_data.description,
            "assignee_id": chore_data.assignee_id,
            "start_date": chore_data.start_date.isoformat(),
            "recurrence": _recurrence_to_row(chore_data.recurrence)
        }).execute()

        if not result.data:
            raise GatewayError("Failed to insert chore")

        return chore_from_row(result.data[0])

    async def update(self, chore_id: str, chore_data: ChoreUpdate) -> Chore:
        """Apply a partial update and return the canonical merged row"""
        patch = changes_to_row(chore_data.changes())

        result = await self.supabase.table(TABLE)\
            .update(patch)\
            .eq("id", chore_id)\
            .execute()

        if not result.data:
            raise GatewayError(f"Chore {chore_id} not found")

        return chore_from_row(result.data[0])

    async def delete_by_id(self, chore_id: str) -> None:
        await self.supabase.table(TABLE)\
            .delete()\
            .eq("id", chore_id)\
            .execute()
        logger.debug(f"Deleted chore {chore_id}")
