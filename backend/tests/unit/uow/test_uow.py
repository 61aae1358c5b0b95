from __future__ import annotations

import pytest
from sqlalchemy import func, select

from tests.factories.user import UserFactory
from videotube.models.user import User
from videotube.uow import SQLAlchemyReadOnlyUnitOfWork as ROuow
from videotube.uow import SQLAlchemyUnitOfWork as RWuow


def _count(session) -> int:
    return session.execute(select(func.count()).select_from(User)).scalar_one()


class TestSQLAlchemyUnitOfWork:
    def test_commits_on_success(self, session):
        with RWuow() as uow:
            uow.users.create(
                username="writer",
                email="w@x.com",
                full_name="Writer",
                password="pw",
                avatar="http://cdn/w.png",
            )

        assert session.execute(select(User).where(User.username == "writer")).scalar_one()

    def test_rolls_back_on_error(self, session):
        before = _count(session)
        with pytest.raises(RuntimeError), RWuow() as uow:
            uow.users.add(UserFactory.build())
            raise RuntimeError("boom")

        assert _count(session) == before

    def test_repositories_share_the_session(self, session):
        with RWuow() as uow:
            assert uow.users.session is uow.session


class TestSQLAlchemyReadOnlyUnitOfWork:
    def test_blocks_orm_flush_writes(self, session):
        with ROuow() as uow, pytest.raises(RuntimeError, match="ORM flush blocked"):
            uow.session.add(UserFactory.build())
            uow.session.flush()

    def test_allows_reads(self, session):
        with RWuow() as uow:
            uow.users.add(UserFactory.build())

        with ROuow() as uow:
            assert _count(uow.session) >= 1

    def test_disallows_commit(self, session):
        with ROuow() as uow, pytest.raises(RuntimeError, match="does not allow commit"):
            uow.commit()

    def test_guard_is_removed_on_exit(self, session):
        with ROuow():
            pass

        with RWuow() as uow:
            user = uow.users.add(UserFactory.build())
        assert user.id is not None
