from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from campaign_dashboard.api.schemas import (
    InfluencerCreate,
    InfluencerResponse,
    InfluencerUpdate,
)
from campaign_dashboard.core.config import settings
from campaign_dashboard.core.deps import get_db
from campaign_dashboard.core.rate_limit import limiter
from campaign_dashboard.core.security import get_current_user
from campaign_dashboard.models.user import User
from campaign_dashboard.services import influencer as influencer_svc

# Influencers are shared: any authenticated user may read and edit them.
router = APIRouter(
    prefix="/influencers",
    tags=["influencers"],
    dependencies=[Depends(get_current_user)],
)


@router.post("", response_model=InfluencerResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.rate_limit_mutations)
async def create_influencer(
    request: Request,
    body: InfluencerCreate,
    db: AsyncSession = Depends(get_db),
):
    return await influencer_svc.create_influencer(db, body)


@router.get("", response_model=list[InfluencerResponse])
async def list_influencers(db: AsyncSession = Depends(get_db)):
    return await influencer_svc.get_influencers(db)


@router.patch("/{influencer_id}", status_code=status.HTTP_204_NO_CONTENT)
@limiter.limit(settings.rate_limit_mutations)
async def update_influencer(
    request: Request,
    influencer_id: int,
    body: InfluencerUpdate,
    db: AsyncSession = Depends(get_db),
) -> None:
    await influencer_svc.update_influencer(db, influencer_id, body)


@router.delete("/{influencer_id}", status_code=status.HTTP_204_NO_CONTENT)
@limiter.limit(settings.rate_limit_mutations)
async def delete_influencer(
    request: Request,
    influencer_id: int,
    db: AsyncSession = Depends(get_db),
) -> None:
    await influencer_svc.delete_influencer(db, influencer_id)
