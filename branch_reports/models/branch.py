"""Branch ORM model."""
from __future__ import annotations

import uuid

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from branch_reports.models.base import Base, CreatedAtMixin


class Branch(CreatedAtMixin, Base):
    """Organizational location funds are moved between."""

    __tablename__ = "branches"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name: Mapped[str] = mapped_column(String(255), nullable=False)


__all__ = ["Branch"]
