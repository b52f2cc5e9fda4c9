"""SQLAlchemy Unit of Work

Wraps one AsyncSession. Repositories built on the same session write into
the same database transaction, so a single commit lands all of them.
"""

from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.services.unit_of_work import UnitOfWork


class SqlAlchemyUnitOfWork(UnitOfWork):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def commit(self):
        await self.session.commit()

    async def rollback(self):
        # Expires every loaded entity; re-query before touching them again
        await self.session.rollback()
