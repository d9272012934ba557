"""
Operation Result Models

Every State Engine operation returns an OperationResult instead of
raising. A rejected operation hands back the very same BillState
instance it was given, plus a structured Rejection saying why.

IMPORTANT: Rejections are expected user-input conditions, not errors.
The form layer should already have screened them out; the engine's
checks are a backstop.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from bill_splitter.models.bill import BillState


class RejectionCode(str, Enum):
    """Why an operation was not applied."""
    # Lookups
    PERSON_NOT_FOUND = "person_not_found"
    ITEM_NOT_FOUND = "item_not_found"
    TARGET_NOT_FOUND = "target_not_found"

    # Split validation
    UNKNOWN_PERSON = "unknown_person"
    DUPLICATE_SPLIT = "duplicate_split"
    INVALID_SPLIT_TOTAL = "invalid_split_total"

    # Referential integrity
    PERSON_HAS_ITEMS = "person_has_items"
    INVALID_REASSIGN_TARGET = "invalid_reassign_target"

    # Values
    INVALID_AMOUNT = "invalid_amount"
    INVALID_TIP_MODE = "invalid_tip_mode"


class Rejection(BaseModel):
    """A structured reason for a no-op."""
    model_config = ConfigDict(frozen=True)

    code: RejectionCode
    message: str = Field(..., max_length=500)
    details: dict = Field(default_factory=dict)


class OperationResult(BaseModel):
    """
    Outcome of one State Engine operation.

    applied=True: state is the new BillState.
    applied=False: state is the unchanged input and rejection says why.
    """
    model_config = ConfigDict(frozen=True)

    operation: str
    state: BillState
    applied: bool
    rejection: Optional[Rejection] = None

    @property
    def rejected(self) -> bool:
        return not self.applied
