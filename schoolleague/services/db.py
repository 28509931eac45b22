"""Transaction boundary and row-locking helpers for the resource store."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Type, TypeVar

from flask import current_app
from sqlalchemy import select
from sqlalchemy.orm import scoped_session

from schoolleague.extensions import db
from schoolleague.models import School, User

Model = TypeVar("Model", bound=db.Model)


@contextmanager
def atomic() -> Iterator[scoped_session]:
    """Run the enclosed writes as one unit: commit on success, roll back on error.

    Any exception raised inside the block is re-raised after the rollback so
    nothing written inside the block is ever observable on failure.
    """
    session = db.session
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise


def get(model: Type[Model], object_id: str | None) -> Model | None:
    """Point-in-time lookup by primary key; empty ids resolve to None."""
    if not object_id:
        return None
    return db.session.get(model, object_id)


def _locked(model: Type[Model], object_id: str | None) -> Model | None:
    if not object_id:
        return None
    stmt = (
        select(model)
        .where(model.id == object_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return db.session.execute(stmt).scalar_one_or_none()


def lock_school(school_id: str | None) -> School | None:
    """Load a school holding its row lock until the current transaction ends.

    Two writers racing on the same school serialize here. SQLite ignores
    FOR UPDATE; its database-level write lock serializes instead.
    """
    school = _locked(School, school_id)
    if school is not None:
        current_app.logger.debug(f"Locked school {school_id}")
    return school


def lock_user(user_id: str | None) -> User | None:
    """Load a user holding its row lock until the current transaction ends."""
    return _locked(User, user_id)


def ensure_core_tables() -> None:
    """Create the ORM tables when they are missing (fresh development database)."""
    db.create_all()


__all__ = ["atomic", "get", "lock_school", "lock_user", "ensure_core_tables"]
