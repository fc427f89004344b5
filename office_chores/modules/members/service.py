from supabase import AsyncClient
from office_chores.core.exceptions import GatewayError
from office_chores.modules.members.schemas import TeamMember, TeamMemberCreate
from typing import Any, Dict, List
import logging

logger = logging.getLogger(__name__)

TABLE = "team_members"


def member_from_row(row: Dict[str, Any]) -> TeamMember:
    return TeamMember(id=str(row["id"]), name=row["name"], color=row["color"])


class MemberService:
    def __init__(self, supabase: AsyncClient):
        self.supabase = supabase

    async def fetch_all(self) -> List[TeamMember]:
        """All members, oldest first"""
        result = await self.supabase.table(TABLE)\
            .select("*")\
            .order("created_at")\
            .execute()
        return [member_from_row(row) for row in (result.data or [])]

    async def insert(self, member_data: TeamMemberCreate) -> TeamMember:
        """Insert a member; the server assigns id and created_at"""
        result = await self.supabase.table(TABLE).insert({
            "name": member_data.name,
            "color": member_data.color
        }).execute()

        if not result.data:
            raise GatewayError("Failed to insert team member")

        return member_from_row(result.data[0])

    async def delete_by_id(self, member_id: str) -> None:
        await self.supabase.table(TABLE)\
            .delete()\
            .eq("id", member_id)\
            .execute()
        logger.debug(f"Deleted team member {member_id}")
