from supabase import AsyncClient
from office_chores.core.exceptions import GatewayError
from office_chores.modules.completions.schemas import CompletionCreate, CompletionRecord
from typing import Any, Dict, List
from datetime import date
import logging

logger = logging.getLogger(__name__)

TABLE = "completions"


def completion_from_row(row: Dict[str, Any]) -> CompletionRecord:
    return CompletionRecord(
        id=str(row["id"]),
        chore_id=str(row["chore_id"]),
        occurrence_date=row["occurrence_date"],
        completed_at=row["completed_at"],
        completed_by_id=str(row["completed_by_id"]),
    )


class CompletionService:
    def __init__(self, supabase: AsyncClient):
        self.supabase = supabase

    async def fetch_all(self) -> List[CompletionRecord]:
        """All completions, most recently completed first"""
        result = await self.supabase.table(TABLE)\
            .select("*")\
            .order("completed_at", desc=True)\
            .execute()
        return [completion_from_row(row) for row in (result.data or [])]

    async def insert(self, completion_data: CompletionCreate) -> CompletionRecord:
        result = await self.supabase.table(TABLE).insert({
            "chore_id": completion_data.chore_id,
            "occurrence_date": completion_data.occurrence_date.isoformat(),
            "completed_at": completion_data.completed_at.isoformat(),
            "completed_by_id": completion_data.completed_by_id
        }).execute()

        if not result.data:
            raise GatewayError("Failed to insert completion")

        return completion_from_row(result.data[0])

    async def delete_by_composite_key(self, chore_id: str, occurrence_date: date) -> None:
        await self.supabase.table(TABLE)\
            .delete()\
            .eq("chore_id", chore_id)\
            .eq("occurrence_date", occurrence_date.isoformat())\
            .execute()
        logger.debug(f"Deleted completion {chore_id}::{occurrence_date.isoformat()}")
