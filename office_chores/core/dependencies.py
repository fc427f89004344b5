"""
Core dependencies shared by the routers
"""

from fastapi import HTTPException, Request, status
from office_chores.modules.sync.store import SyncStore
import logging

logger = logging.getLogger(__name__)


def get_store(request: Request) -> SyncStore:
    """Return the application's sync store (created on startup)"""
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Store is not initialized"
        )
    if store.state.is_loading:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Store is still loading"
        )
    return store


def raise_for_store_error(store: SyncStore) -> None:
    """Translate a rolled-back mutation into a 502 carrying the store's error"""
    error = store.state.error
    logger.warning(f"Mutation rejected by remote store: {error}")
    raise HTTPException(
        status_code=status.HTTP_502_BAD_GATEWAY,
        detail=error or "Remote operation failed"
    )
