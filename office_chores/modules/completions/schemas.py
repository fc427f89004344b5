from pydantic import BaseModel, Field
from datetime import date, datetime, timezone


def _now() -> datetime:
    return datetime.now(timezone.utc)


class CompletionCreate(BaseModel):
    chore_id: str
    occurrence_date: date
    completed_by_id: str
    completed_at: datetime = Field(default_factory=_now)


class CompletionRecord(BaseModel):
    id: str
    chore_id: str
    occurrence_date: date
    completed_at: datetime
    completed_by_id: str

    class Config:
        from_attributes = True
        frozen = True


class ToggleCompletion(BaseModel):
    completed_by_id: str
