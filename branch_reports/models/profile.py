"""Staff profile ORM model."""
from __future__ import annotations

import uuid

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from branch_reports.models.base import Base, CreatedAtMixin


class Profile(CreatedAtMixin, Base):
    """Staff member linked to an identity-provider account."""

    __tablename__ = "profiles"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    auth_user_id: Mapped[str | None] = mapped_column(String(36), unique=True, index=True)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    branch_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("branches.id", ondelete="SET NULL"), nullable=True
    )


__all__ = ["Profile"]
