"""Generic repository base for SQLAlchemy 2.x.

Repositories are persistence-only: lookups, staged inserts and whitelisted
field assignment. They never commit or roll back; services open a Unit of
Work around every use case and own the transaction boundary.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Generic, TypeVar, cast

from sqlalchemy import select
from sqlalchemy.orm import InstrumentedAttribute, Session

from videotube.core.extensions import db

E = TypeVar("E")  # SQLAlchemy mapped entity type


class BaseRepository(Generic[E]):
    """Persistence-only repository for a single mapped class.

    Subclasses set ``model`` and list the keys callers may assign through
    :meth:`assign_updates` in ``_updatable_fields``; anything else is refused,
    so request payloads can never mass-assign columns such as password hashes.
    """

    #: SQLAlchemy mapped model (must be set by subclasses)
    model: type[E]

    def __init__(self, session: Session | None = None) -> None:
        """
        :param session: Session shared across the Unit of Work; defaults to the
            Flask-scoped session.
        :type session: :class:`sqlalchemy.orm.Session` | None
        """
        self._session: Session | None = session

    @property
    def session(self) -> Session:
        if self._session is not None:
            return self._session
        return cast(Session, db.session)

    def _pk_attr(self) -> InstrumentedAttribute[Any]:
        pk = getattr(self.model, "id", None)
        if pk is None:
            raise RuntimeError(f"{self.model.__name__} has no 'id' attribute.")
        return pk

    def _updatable_fields(self) -> set[str]:
        """Keys accepted by :meth:`assign_updates`. Empty by default."""
        return set()

    # --------------------------------- Reads ---------------------------------

    def get(self, entity_id: Any) -> E | None:
        """Return the entity with primary key ``entity_id`` or ``None``."""
        stmt = select(self.model).where(self._pk_attr() == entity_id)
        return cast(E | None, self.session.execute(stmt).scalars().first())

    def get_for_update(self, entity_id: Any) -> E | None:
        """Like :meth:`get`, locking the row (``FOR UPDATE``) where supported."""
        stmt = select(self.model).where(self._pk_attr() == entity_id).with_for_update()
        return cast(E | None, self.session.execute(stmt).scalars().first())

    # --------------------------------- Writes --------------------------------

    def add(self, instance: E) -> E:
        """Stage ``instance`` and flush so its primary key is populated."""
        self.session.add(instance)
        self.flush()
        return instance

    def flush(self) -> None:
        self.session.flush()

    def assign_updates(
        self,
        instance: E,
        fields: Mapping[str, Any],
        *,
        strict: bool = True,
        flush: bool = True,
    ) -> E:
        """Assign whitelisted ``fields`` onto ``instance``.

        Values go through ``setattr`` so the model's ``@validates`` hooks run.

        :param instance: Entity to mutate.
        :type instance: E
        :param fields: Mapping of attribute name to new value.
        :type fields: Mapping[str, Any]
        :param strict: Raise instead of silently dropping non-whitelisted keys.
        :type strict: bool
        :param flush: Flush after assignment.
        :type flush: bool
        :returns: The mutated instance.
        :rtype: E
        :raises ValueError: If ``strict`` and a key is not whitelisted.
        """
        allowed = self._updatable_fields()
        rejected = sorted(k for k in fields if k not in allowed)
        if rejected and strict:
            raise ValueError(f"Unknown or non-updatable fields: {rejected}")
        for key, value in fields.items():
            if key in allowed:
                setattr(instance, key, value)
        if flush:
            self.flush()
        return instance
