"""Unit tests for the BestRegi persistence context."""

from sqlalchemy import inspect

from bestregi.core.database import BestRegiContext
from bestregi.core.database.entities import IdentityUser


class TestBestRegiContext:
    async def test_ensure_created_creates_identity_table(self):
        context = BestRegiContext("sqlite:///:memory:")
        try:
            await context.ensure_created()
            async with context.engine.connect() as conn:
                tables = await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())
            assert "identity_users" in tables
        finally:
            await context.dispose()

    async def test_ensure_created_is_idempotent(self, db_context):
        await db_context.ensure_created()

    def test_repr_hides_password(self):
        context = BestRegiContext("postgresql://bestregi:s3cret@db/bestregi")

        assert "s3cret" not in repr(context)
        assert "postgresql+asyncpg" in repr(context)

    async def test_sessions_share_in_memory_database(self, db_context):
        async with db_context.session() as session:
            user = IdentityUser(user_name="a", normalized_user_name="A")
            session.add(user)
            await session.commit()
            user_id = user.id

        async with db_context.session() as session:
            assert await session.get(IdentityUser, user_id) is not None
