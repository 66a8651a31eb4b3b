from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession

from campaign_dashboard.db.session import async_session_factory


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency that yields an async database session.

    One session per request; every service call commits or rolls back
    its own unit of work on it.
    """
    async with async_session_factory() as session:
        try:
            yield session
        finally:
            await session.close()
