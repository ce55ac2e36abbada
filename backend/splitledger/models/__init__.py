from splitledger.models.user import User
from splitledger.models.group import Group, GroupMember, GroupRole
from splitledger.models.expense import Expense, ExpenseSplit

__all__ = [
    "User", "Group", "GroupMember", "GroupRole",
    "Expense", "ExpenseSplit",
]
