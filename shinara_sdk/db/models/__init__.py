from shinara_sdk.db.models.base import Base
from shinara_sdk.db.models.state_set_members import StateSetMember
from shinara_sdk.db.models.state_values import StateValue

__all__ = ["Base", "StateSetMember", "StateValue"]
