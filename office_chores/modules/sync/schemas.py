from pydantic import BaseModel
from typing import Optional


class SyncStatusResponse(BaseModel):
    is_loading: bool
    error: Optional[str] = None
    version: int
    pending_mutations: int
    members: int
    chores: int
    completions: int
