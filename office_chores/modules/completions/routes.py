from fastapi import APIRouter, Depends, HTTPException, Response
from office_chores.core.dependencies import get_store, raise_for_store_error
from office_chores.modules.completions.schemas import CompletionCreate, CompletionRecord
from office_chores.modules.sync import reconcile
from office_chores.modules.sync.store import SyncStore
from typing import List, Optional
from datetime import date

router = APIRouter(prefix="/completions", tags=["completions"])


@router.get("", response_model=List[CompletionRecord])
async def completion_history(
    member_id: Optional[str] = None,
    chore_id: Optional[str] = None,
    store: SyncStore = Depends(get_store)
):
    """Completion history, most recent first, optionally filtered by member and/or chore"""
    return store.completion_history(member_id=member_id, chore_id=chore_id)


@router.post("", response_model=CompletionRecord, status_code=201)
async def record_completion(
    completion_data: CompletionCreate,
    response: Response,
    store: SyncStore = Depends(get_store)
):
    """Mark an occurrence done. Recording the same occurrence twice returns the existing record with 200."""
    existing = reconcile.find_completion(
        store.state.completions, completion_data.chore_id, completion_data.occurrence_date
    )
    if existing is not None:
        response.status_code = 200
    completion = await store.record_completion(completion_data)
    if completion is None:
        raise_for_store_error(store)
    return completion


@router.delete("", status_code=204)
async def remove_completion(chore_id: str, occurrence_date: date, store: SyncStore = Depends(get_store)):
    """Un-mark an occurrence, addressed by chore and occurrence date"""
    if reconcile.find_completion(store.state.completions, chore_id, occurrence_date) is None:
        raise HTTPException(status_code=404, detail="Completion not found")
    if not await store.remove_completion(chore_id, occurrence_date):
        raise_for_store_error(store)
    return None
