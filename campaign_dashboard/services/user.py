from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from campaign_dashboard.models.user import AuthSession, User


async def get_user_by_session_token(db: AsyncSession, session_token: str) -> User | None:
    """Resolve a provider-issued session token to its user, ignoring expired sessions."""
    now = datetime.now(timezone.utc).replace(tzinfo=None)
    result = await db.execute(
        select(User)
        .join(AuthSession, AuthSession.user_id == User.id)
        .where(AuthSession.session_token == session_token, AuthSession.expires > now)
    )
    return result.scalar_one_or_none()
