from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from campaign_dashboard.core.config import settings

engine = create_async_engine(
    settings.database_url,
    echo=settings.debug,
    future=True,
)

async_session_factory = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)
