from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from campaign_dashboard.core.deps import get_db
from campaign_dashboard.core.errors import UnauthenticatedError
from campaign_dashboard.models.user import User
from campaign_dashboard.services.user import get_user_by_session_token

bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """FastAPI dependency: resolve the caller from the auth provider's session token.

    Runs before any service logic, so an unauthenticated request never
    reaches a campaign or influencer operation.
    """
    if credentials is None or not credentials.credentials:
        raise UnauthenticatedError("Not authenticated")

    user = await get_user_by_session_token(db, credentials.credentials)
    if user is None:
        raise UnauthenticatedError("Invalid or expired session")

    return user
