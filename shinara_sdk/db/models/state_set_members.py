from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from shinara_sdk.db.models.base import Base


class StateSetMember(Base):
    __tablename__ = "sdk_state_set_members"
    __table_args__ = (Index("idx_sdk_state_set_members_added_at", "set_name", "added_at"),)

    set_name: Mapped[str] = mapped_column(String(128), primary_key=True)
    member: Mapped[str] = mapped_column(String(512), primary_key=True)
    added_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
