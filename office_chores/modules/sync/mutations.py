from dataclasses import dataclass, field
from typing import Dict, Tuple
from enum import Enum
from uuid import uuid4


class MutationKind(str, Enum):
    ADD_MEMBER = "add_member"
    REMOVE_MEMBER = "remove_member"
    ADD_CHORE = "add_chore"
    UPDATE_CHORE = "update_chore"
    REMOVE_CHORE = "remove_chore"
    RECORD_COMPLETION = "record_completion"
    REMOVE_COMPLETION = "remove_completion"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ")


@dataclass(frozen=True)
class PendingMutation:
    """An optimistic change awaiting remote confirmation.

    snapshot maps each affected collection name to its value immediately
    before the change was applied; failure restores exactly these values.
    """

    kind: MutationKind
    key: str  # temporary id for creations, target id or composite key otherwise
    snapshot: Dict[str, Tuple]
    token: str = field(default_factory=lambda: uuid4().hex)
