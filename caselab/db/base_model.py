"""
Base model with the query patterns every table shares.

- UUID primary keys, timezone-aware timestamps
- Soft delete: evidence records are never physically removed
- Pagination is mandatory for list queries
"""

import uuid
from datetime import datetime, timezone
from typing import Optional, List, Dict, Any, TypeVar
from sqlalchemy import DateTime, select, func, desc, asc
from sqlalchemy.orm import Mapped, mapped_column, DeclarativeBase
from sqlalchemy.ext.asyncio import AsyncSession

T = TypeVar("T", bound="BaseModel")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all models"""

    pass


class BaseModel(Base):
    """
    Abstract base model with common fields and async CRUD helpers.

    Reads filter out soft-deleted rows unless stated otherwise.
    """

    __abstract__ = True

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
    )
    is_deleted: Mapped[bool] = mapped_column(default=False, index=True)

    # CREATE OPERATIONS

    @classmethod
    async def create(
        cls: type[T], db: AsyncSession, commit: bool = True, **kwargs
    ) -> T:
        """
        Create new instance and optionally commit.

        With commit=False the row is flushed so its id is usable in the
        same transaction.
        """
        instance = cls(**kwargs)
        db.add(instance)

        if commit:
            await db.commit()
            await db.refresh(instance)
        else:
            await db.flush()

        return instance

    # READ OPERATIONS

    @classmethod
    async def get_by_id(cls: type[T], db: AsyncSession, id: Any) -> Optional[T]:
        """
        Get single live record by primary key.
        """
        instance = await db.get(cls, id)
        if instance is None or instance.is_deleted:
            return None
        return instance

    @classmethod
    async def find_one(
        cls: type[T],
        db: AsyncSession,
        filters: Optional[Dict[str, Any]] = None,
        **kwargs,
    ) -> Optional[T]:
        """
        Get first matching record.
        """
        query = select(cls).where(cls.is_deleted == False)  # noqa: E712
        if filters:
            query = query.filter_by(**filters)
        if kwargs:
            query = query.filter_by(**kwargs)
        result = await db.execute(query)
        return result.scalars().first()

    @classmethod
    async def find_many(
        cls: type[T],
        db: AsyncSession,
        limit: int = 100,
        offset: int = 0,
        filters: Optional[Dict[str, Any]] = None,
        order_by: Optional[str] = None,
        order_desc: bool = False,
        **kwargs,
    ) -> List[T]:
        """
        Get paginated list of records.

        Defaults to newest first when no ordering column is given.
        """
        limit = min(limit, 1000)
        query = select(cls).where(cls.is_deleted == False).offset(offset).limit(limit)  # noqa: E712

        if filters:
            query = query.filter_by(**filters)
        if kwargs:
            query = query.filter_by(**kwargs)

        if order_by and hasattr(cls, order_by):
            column = getattr(cls, order_by)
            query = query.order_by(desc(column) if order_desc else asc(column))
        else:
            query = query.order_by(desc(cls.created_at))

        result = await db.execute(query)
        return list(result.scalars().all())

    @classmethod
    async def count(
        cls: type[T],
        db: AsyncSession,
        filters: Optional[Dict[str, Any]] = None,
        **kwargs,
    ) -> int:
        """
        Count matching live records.
        """
        query = select(func.count()).select_from(cls).where(cls.is_deleted == False)  # noqa: E712

        if filters:
            query = query.filter_by(**filters)
        if kwargs:
            query = query.filter_by(**kwargs)

        result = await db.execute(query)
        return result.scalar_one()

    @classmethod
    async def exists(
        cls: type[T],
        db: AsyncSession,
        filters: Optional[Dict[str, Any]] = None,
        **kwargs,
    ) -> bool:
        """
        Check if a matching live record exists.
        """
        query = select(cls.id).where(cls.is_deleted == False)  # noqa: E712

        if filters:
            query = query.filter_by(**filters)
        if kwargs:
            query = query.filter_by(**kwargs)

        result = await db.execute(select(query.exists()))
        return bool(result.scalar())

    # UPDATE OPERATIONS

    async def save(self: T, db: AsyncSession, commit: bool = True) -> T:
        """
        Save changes to existing instance.
        """
        self.updated_at = utcnow()
        db.add(self)

        if commit:
            await db.commit()
            await db.refresh(self)

        return self

    async def soft_delete(self, db: AsyncSession, commit: bool = True) -> None:
        """Mark record as deleted without removing it (audit-safe)."""
        self.is_deleted = True
        if commit:
            await db.commit()
            await db.refresh(self)

    # PAGINATION HELPERS

    @classmethod
    async def paginate(
        cls: type[T],
        db: AsyncSession,
        page: int = 1,
        per_page: int = 20,
        filters: Optional[Dict[str, Any]] = None,
        order_by: Optional[str] = None,
        order_desc: bool = False,
        **kwargs,
    ) -> Dict[str, Any]:
        """
        Get paginated results with metadata.
        """
        per_page = min(per_page, 100)
        page = max(page, 1)
        offset = (page - 1) * per_page

        total = await cls.count(db, filters=filters, **kwargs)
        items = await cls.find_many(
            db,
            filters=filters,
            limit=per_page,
            offset=offset,
            order_by=order_by,
            order_desc=order_desc,
            **kwargs,
        )

        pages = (total + per_page - 1) // per_page

        return {
            "items": items,
            "total": total,
            "page": page,
            "per_page": per_page,
            "pages": pages,
            "has_next": page < pages,
            "has_prev": page > 1,
        }
