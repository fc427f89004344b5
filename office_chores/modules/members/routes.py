from fastapi import APIRouter, Depends, HTTPException
from office_chores.core.dependencies import get_store, raise_for_store_error
from office_chores.modules.members.schemas import TeamMember, TeamMemberCreate, ChoreCountResponse
from office_chores.modules.sync import reconcile
from office_chores.modules.sync.store import SyncStore
from typing import List

router = APIRouter(prefix="/members", tags=["members"])


@router.get("", response_model=List[TeamMember])
async def list_members(store: SyncStore = Depends(get_store)):
    """List team members in creation order"""
    return list(store.state.members)


@router.post("", response_model=TeamMember, status_code=201)
async def add_member(member_data: TeamMemberCreate, store: SyncStore = Depends(get_store)):
    """Add a team member; a palette color is assigned when none is given"""
    member = await store.add_member(member_data)
    if member is None:
        raise_for_store_error(store)
    return member


@router.get("/{member_id}/chore-count", response_model=ChoreCountResponse)
async def get_chore_count(member_id: str, store: SyncStore = Depends(get_store)):
    if not reconcile.contains_id(store.state.members, member_id):
        raise HTTPException(status_code=404, detail="Team member not found")
    return ChoreCountResponse(member_id=member_id, assigned_chores=store.assigned_chore_count(member_id))


@router.delete("/{member_id}", status_code=204)
async def remove_member(member_id: str, store: SyncStore = Depends(get_store)):
    """Remove a team member; their chores become unassigned"""
    if not reconcile.contains_id(store.state.members, member_id):
        raise HTTPException(status_code=404, detail="Team member not found")
    if not await store.remove_member(member_id):
        raise_for_store_error(store)
    return None
