import logging
from datetime import datetime

from sqlalchemy import delete, exists, insert, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from campaign_dashboard.api.schemas import CampaignCreate, CampaignUpdate
from campaign_dashboard.core.errors import ConflictError, NotFoundError, ValidationError
from campaign_dashboard.models.campaign import Campaign
from campaign_dashboard.models.campaign_influencer import CampaignInfluencer
from campaign_dashboard.models.influencer import Influencer
from campaign_dashboard.models.user import User

logger = logging.getLogger(__name__)

CAMPAIGN_NOT_FOUND = "Campaign not found"


def _check_date_range(start_date: datetime, end_date: datetime) -> None:
    if start_date > end_date:
        raise ValidationError("end_date cannot be before start_date", field="end_date")


async def create_campaign(db: AsyncSession, owner: User, data: CampaignCreate) -> Campaign:
    _check_date_range(data.start_date, data.end_date)
    campaign = Campaign(
        owner_id=owner.id,
        title=data.title,
        description=data.description,
        budget=data.budget,
        start_date=data.start_date,
        end_date=data.end_date,
    )
    db.add(campaign)
    await db.commit()
    await db.refresh(campaign)
    logger.info("Campaign created", extra={"campaign_id": campaign.id, "owner_id": owner.id})
    return campaign


async def get_campaigns(db: AsyncSession, owner_id: str) -> list[Campaign]:
    result = await db.execute(
        select(Campaign)
        .where(Campaign.owner_id == owner_id)
        .order_by(Campaign.created_at.desc(), Campaign.id.desc())
    )
    return list(result.scalars().all())


async def get_campaign(db: AsyncSession, campaign_id: int, owner_id: str) -> Campaign:
    """Return an owned campaign with its assigned influencers loaded.

    A campaign that exists but belongs to someone else raises exactly the
    same NotFoundError as one that does not exist.
    """
    result = await db.execute(
        select(Campaign)
        .where(Campaign.id == campaign_id, Campaign.owner_id == owner_id)
        .options(selectinload(Campaign.influencers))
    )
    campaign = result.scalar_one_or_none()
    if not campaign:
        raise NotFoundError(CAMPAIGN_NOT_FOUND)
    return campaign


async def _ensure_owned(db: AsyncSession, campaign_id: int, owner_id: str) -> None:
    result = await db.execute(
        select(Campaign.id).where(Campaign.id == campaign_id, Campaign.owner_id == owner_id)
    )
    if result.scalar_one_or_none() is None:
        raise NotFoundError(CAMPAIGN_NOT_FOUND)


async def update_campaign(
    db: AsyncSession, campaign_id: int, owner_id: str, data: CampaignUpdate
) -> None:
    changes = data.model_dump(exclude_unset=True)

    result = await db.execute(
        select(Campaign).where(Campaign.id == campaign_id, Campaign.owner_id == owner_id)
    )
    campaign = result.scalar_one_or_none()
    if not campaign:
        raise NotFoundError(CAMPAIGN_NOT_FOUND)

    if "start_date" in changes or "end_date" in changes:
        _check_date_range(
            changes.get("start_date", campaign.start_date),
            changes.get("end_date", campaign.end_date),
        )

    if not changes:
        return

    # Re-check ownership in the UPDATE itself: a concurrent delete leaves zero rows
    result = await db.execute(
        update(Campaign)
        .where(Campaign.id == campaign_id, Campaign.owner_id == owner_id)
        .values(**changes)
    )
    if result.rowcount == 0:
        await db.rollback()
        raise NotFoundError(CAMPAIGN_NOT_FOUND)
    await db.commit()
    logger.info(
        "Campaign updated",
        extra={"campaign_id": campaign_id, "fields": sorted(changes)},
    )


async def delete_campaign(db: AsyncSession, campaign_id: int, owner_id: str) -> None:
    result = await db.execute(
        delete(Campaign).where(Campaign.id == campaign_id, Campaign.owner_id == owner_id)
    )
    if result.rowcount == 0:
        await db.rollback()
        raise NotFoundError(CAMPAIGN_NOT_FOUND)
    await db.commit()
    logger.info("Campaign deleted", extra={"campaign_id": campaign_id, "owner_id": owner_id})


# ---------------------------------------------------------------------------
# Influencer assignments
# ---------------------------------------------------------------------------


async def assign_influencer(
    db: AsyncSession, campaign_id: int, influencer_id: int, owner_id: str
) -> None:
    await _ensure_owned(db, campaign_id, owner_id)

    result = await db.execute(select(Influencer.id).where(Influencer.id == influencer_id))
    if result.scalar_one_or_none() is None:
        raise NotFoundError("Influencer not found")

    result = await db.execute(
        select(
            exists().where(
                CampaignInfluencer.campaign_id == campaign_id,
                CampaignInfluencer.influencer_id == influencer_id,
            )
        )
    )
    if result.scalar():
        raise ConflictError("Influencer is already assigned to this campaign")

    try:
        await db.execute(
            insert(CampaignInfluencer).values(
                campaign_id=campaign_id, influencer_id=influencer_id
            )
        )
        await db.commit()
    except IntegrityError as exc:
        # Lost a race with an identical assignment
        await db.rollback()
        raise ConflictError("Influencer is already assigned to this campaign") from exc

    logger.info(
        "Influencer assigned",
        extra={"campaign_id": campaign_id, "influencer_id": influencer_id},
    )


async def remove_influencer(
    db: AsyncSession, campaign_id: int, influencer_id: int, owner_id: str
) -> None:
    """Drop an assignment. Removing a pair that is not assigned is a no-op."""
    await _ensure_owned(db, campaign_id, owner_id)

    result = await db.execute(
        delete(CampaignInfluencer).where(
            CampaignInfluencer.campaign_id == campaign_id,
            CampaignInfluencer.influencer_id == influencer_id,
        )
    )
    await db.commit()
    if result.rowcount:
        logger.info(
            "Influencer removed",
            extra={"campaign_id": campaign_id, "influencer_id": influencer_id},
        )


async def get_available_influencers(
    db: AsyncSession, campaign_id: int, owner_id: str
) -> list[Influencer]:
    """Influencers that can still be assigned to the campaign, by name."""
    await _ensure_owned(db, campaign_id, owner_id)

    assigned = select(CampaignInfluencer.influencer_id).where(
        CampaignInfluencer.campaign_id == campaign_id
    )
    result = await db.execute(
        select(Influencer)
        .where(Influencer.id.not_in(assigned))
        .order_by(Influencer.name.asc(), Influencer.id.asc())
    )
    return list(result.scalars().all())
