from fastapi import APIRouter, Depends, HTTPException
from office_chores.core.dependencies import get_store, raise_for_store_error
from office_chores.modules.calendar.schemas import CalendarView, ChoreCalendarEvent
from office_chores.modules.calendar.views import range_for_view
from office_chores.modules.completions.schemas import ToggleCompletion
from office_chores.modules.sync import reconcile
from office_chores.modules.sync.store import SyncStore
from typing import List, Optional
from datetime import date

router = APIRouter(prefix="/calendar", tags=["calendar"])


def _events_for(store: SyncStore, chore_id: str, occurrence_date: date) -> List[ChoreCalendarEvent]:
    return [e for e in store.events_between(occurrence_date, occurrence_date) if e.chore_id == chore_id]


@router.get("/events", response_model=List[ChoreCalendarEvent])
async def list_events(
    start: Optional[date] = None,
    end: Optional[date] = None,
    view: Optional[CalendarView] = None,
    anchor: Optional[date] = None,
    store: SyncStore = Depends(get_store)
):
    """Chore occurrences in an inclusive range, given either start/end or a view around an anchor date"""
    if start is None or end is None:
        if view is None:
            raise HTTPException(status_code=400, detail="Provide start and end, or a view")
        start, end = range_for_view(anchor or date.today(), view)
    return store.events_between(start, end)


@router.post("/events/{chore_id}/{occurrence_date}/toggle", response_model=ChoreCalendarEvent)
async def toggle_event(
    chore_id: str,
    occurrence_date: date,
    toggle: ToggleCompletion,
    store: SyncStore = Depends(get_store)
):
    """Mark an occurrence done, or un-mark it if it already is"""
    if not reconcile.contains_id(store.state.chores, chore_id):
        raise HTTPException(status_code=404, detail="Chore not found")
    if not _events_for(store, chore_id, occurrence_date):
        raise HTTPException(status_code=404, detail="Chore does not occur on this date")
    result = await store.toggle_completion(chore_id, occurrence_date, toggle.completed_by_id)
    if result is None:
        raise_for_store_error(store)
    return _events_for(store, chore_id, occurrence_date)[0]
