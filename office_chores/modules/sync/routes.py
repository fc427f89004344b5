from fastapi import APIRouter, Request, HTTPException
from office_chores.modules.sync.schemas import SyncStatusResponse

router = APIRouter(prefix="/sync", tags=["sync"])


def _store(request: Request):
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise HTTPException(status_code=503, detail="Store is not initialized")
    return store


@router.get("/status", response_model=SyncStatusResponse)
async def get_status(request: Request):
    """Loading flag, outstanding error and cache sizes (available while loading)"""
    store = _store(request)
    state = store.state
    return SyncStatusResponse(
        is_loading=state.is_loading,
        error=state.error,
        version=state.version,
        pending_mutations=len(store.pending),
        members=len(state.members),
        chores=len(state.chores),
        completions=len(state.completions),
    )


@router.delete("/error", status_code=204)
async def dismiss_error(request: Request):
    _store(request).dismiss_error()
    return None
