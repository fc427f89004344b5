from pydantic import BaseModel, field_validator
from typing import Optional


def _require_text(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("must not be blank")
    return value


class TeamMemberCreate(BaseModel):
    name: str
    color: Optional[str] = None  # assigned from the palette when omitted

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        return _require_text(value)


class TeamMember(BaseModel):
    id: str
    name: str
    color: str

    class Config:
        from_attributes = True
        frozen = True


class ChoreCountResponse(BaseModel):
    member_id: str
    assigned_chores: int
