import uuid
from decimal import Decimal
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, model_validator

from splitledger.models.group import GroupRole


class MemberRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True, frozen=True)
    id: uuid.UUID
    name: str
    role: GroupRole = GroupRole.member


class ExpenseRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True, frozen=True)
    id: uuid.UUID
    group_id: uuid.UUID
    description: str = ""
    amount: Decimal
    paid_by: uuid.UUID
    split_count: int
    created_at: datetime | None = None


class ExpenseSplitRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True, frozen=True)
    id: uuid.UUID | None = None
    expense_id: uuid.UUID
    member_id: uuid.UUID
    amount: Decimal


class GroupSnapshot(BaseModel):
    """Members, expenses and splits of one group read at a single point in time."""
    model_config = ConfigDict(frozen=True)
    group_id: uuid.UUID
    members: list[MemberRecord] = []
    expenses: list[ExpenseRecord] = []
    splits: list[ExpenseSplitRecord] = []


class MemberBalance(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: uuid.UUID
    name: str
    balance: Decimal


class Settlement(BaseModel):
    model_config = ConfigDict(frozen=True)
    from_member_id: uuid.UUID
    from_name: str
    to_member_id: uuid.UUID
    to_name: str
    amount: Decimal = Field(gt=0)

    @model_validator(mode="after")
    def _distinct_parties(self):
        if self.from_member_id == self.to_member_id:
            raise ValueError("settlement must move money between two different members")
        return self


class ExpenseCreate(BaseModel):
    group_id: uuid.UUID
    description: str
    amount: Decimal
    paid_by: uuid.UUID
    participant_ids: list[uuid.UUID]
