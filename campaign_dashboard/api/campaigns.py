from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from campaign_dashboard.api.schemas import (
    AssignInfluencerRequest,
    CampaignCreate,
    CampaignDetailResponse,
    CampaignResponse,
    CampaignUpdate,
    InfluencerResponse,
)
from campaign_dashboard.core.config import settings
from campaign_dashboard.core.deps import get_db
from campaign_dashboard.core.rate_limit import limiter
from campaign_dashboard.core.security import get_current_user
from campaign_dashboard.models.user import User
from campaign_dashboard.services import campaign as campaign_svc

router = APIRouter(prefix="/campaigns", tags=["campaigns"])


@router.post("", response_model=CampaignResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.rate_limit_mutations)
async def create_campaign(
    request: Request,
    body: CampaignCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await campaign_svc.create_campaign(db, user, body)


@router.get("", response_model=list[CampaignResponse])
async def list_campaigns(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Caller's campaigns, newest first. Assigned influencers are not included."""
    return await campaign_svc.get_campaigns(db, user.id)


@router.get("/{campaign_id}", response_model=CampaignDetailResponse)
async def get_campaign(
    campaign_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await campaign_svc.get_campaign(db, campaign_id, user.id)


@router.patch("/{campaign_id}", status_code=status.HTTP_204_NO_CONTENT)
@limiter.limit(settings.rate_limit_mutations)
async def update_campaign(
    request: Request,
    campaign_id: int,
    body: CampaignUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> None:
    await campaign_svc.update_campaign(db, campaign_id, user.id, body)


@router.delete("/{campaign_id}", status_code=status.HTTP_204_NO_CONTENT)
@limiter.limit(settings.rate_limit_mutations)
async def delete_campaign(
    request: Request,
    campaign_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> None:
    await campaign_svc.delete_campaign(db, campaign_id, user.id)


# ---------------------------------------------------------------------------
# Assignments
# ---------------------------------------------------------------------------


@router.post("/{campaign_id}/influencers", status_code=status.HTTP_204_NO_CONTENT)
@limiter.limit(settings.rate_limit_mutations)
async def assign_influencer(
    request: Request,
    campaign_id: int,
    body: AssignInfluencerRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> None:
    await campaign_svc.assign_influencer(db, campaign_id, body.influencer_id, user.id)


@router.delete(
    "/{campaign_id}/influencers/{influencer_id}", status_code=status.HTTP_204_NO_CONTENT
)
@limiter.limit(settings.rate_limit_mutations)
async def remove_influencer(
    request: Request,
    campaign_id: int,
    influencer_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> None:
    await campaign_svc.remove_influencer(db, campaign_id, influencer_id, user.id)


@router.get("/{campaign_id}/available-influencers", response_model=list[InfluencerResponse])
async def list_available_influencers(
    campaign_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await campaign_svc.get_available_influencers(db, campaign_id, user.id)
