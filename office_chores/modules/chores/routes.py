from fastapi import APIRouter, Depends, HTTPException
from office_chores.core.dependencies import get_store, raise_for_store_error
from office_chores.modules.chores.schemas import Chore, ChoreCreate, ChoreUpdate
from office_chores.modules.sync import reconcile
from office_chores.modules.sync.store import SyncStore
from typing import List

router = APIRouter(prefix="/chores", tags=["chores"])


@router.get("", response_model=List[Chore])
async def list_chores(store: SyncStore = Depends(get_store)):
    return list(store.state.chores)


@router.post("", response_model=Chore, status_code=201)
async def add_chore(chore_data: ChoreCreate, store: SyncStore = Depends(get_store)):
    chore = await store.add_chore(chore_data)
    if chore is None:
        raise_for_store_error(store)
    return chore


@router.patch("/{chore_id}", response_model=Chore)
async def update_chore(chore_id: str, chore_data: ChoreUpdate, store: SyncStore = Depends(get_store)):
    """Partially update a chore; explicit nulls clear assignee, description or recurrence"""
    if not reconcile.contains_id(store.state.chores, chore_id):
        raise HTTPException(status_code=404, detail="Chore not found")
    chore = await store.update_chore(chore_id, chore_data)
    if chore is None:
        raise_for_store_error(store)
    return chore


@router.delete("/{chore_id}", status_code=204)
async def remove_chore(chore_id: str, store: SyncStore = Depends(get_store)):
    """Delete a chore and every completion recorded for it"""
    if not reconcile.contains_id(store.state.chores, chore_id):
        raise HTTPException(status_code=404, detail="Chore not found")
    if not await store.remove_chore(chore_id):
        raise_for_store_error(store)
    return None
