from fastapi import APIRouter, Depends

from campaign_dashboard.api.schemas import UserResponse
from campaign_dashboard.core.security import get_current_user
from campaign_dashboard.models.user import User

router = APIRouter(prefix="/me", tags=["me"])


@router.get("", response_model=UserResponse)
async def get_me(current_user: User = Depends(get_current_user)) -> User:
    """Return the currently authenticated user."""
    return current_user
