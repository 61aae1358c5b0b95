"""Factory Boy base wired to the per-test transactional session."""

from __future__ import annotations

import factory


class SQLAlchemySession:
    """Hold the scoped session installed by the ``session`` fixture."""

    _session = None

    @classmethod
    def set(cls, session):
        cls._session = session

    @classmethod
    def get(cls):
        """Return the registered session.

        Raises
        ------
        RuntimeError
            If a factory runs outside a test using the ``session`` fixture.
        """
        if cls._session is None:
            raise RuntimeError("Factories session not set. Did you pass the 'session' fixture?")
        return cls._session


class BaseFactory(factory.alchemy.SQLAlchemyModelFactory):
    """Commit-on-create persistence.

    Services roll back their own unit of work on failure, so factory rows are
    committed up front. The commit only releases a SAVEPOINT; the outer test
    transaction is still rolled back afterwards.
    """

    class Meta:
        abstract = True
        # A callable keeps the lookup lazy so each test gets its own session.
        sqlalchemy_session_factory = SQLAlchemySession.get
        sqlalchemy_session_persistence = "commit"
