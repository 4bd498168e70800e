"""
Auth ORM models.

Profiles are the user records; role assignments are the authoritative
source of a user's role.
"""

import uuid
from typing import Optional
from sqlalchemy import BigInteger, Boolean, ForeignKey, Identity, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from caselab.db.base_model import BaseModel


class Profile(BaseModel):
    """
    One profile per user, created at provisioning and maintained by
    administrators.

    `role` is denormalized and only consulted when the user has no role
    assignment. It is a plain string: legacy values that are no longer
    valid roles must still load (they resolve to no permissions).
    """

    __tablename__ = "profiles"

    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    hashed_password: Mapped[str] = mapped_column(String(512), nullable=False)
    badge_number: Mapped[Optional[str]] = mapped_column(String(50), unique=True, nullable=True)
    department: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    role: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)


class RoleAssignment(BaseModel):
    """
    Role granted to a user.

    A user may hold several rows; the earliest is authoritative. `sequence`
    breaks ties between rows created in the same instant.
    """

    __tablename__ = "user_roles"

    user_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("profiles.id"), nullable=False, index=True)
    role: Mapped[str] = mapped_column(String(50), nullable=False)
    sequence: Mapped[int] = mapped_column(BigInteger, Identity(), nullable=False)
    assigned_by: Mapped[Optional[uuid.UUID]] = mapped_column(ForeignKey("profiles.id"), nullable=True)

    __table_args__ = (
        Index("idx_user_roles_user_created", "user_id", "created_at", "sequence"),
    )
