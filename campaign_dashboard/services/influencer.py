import logging

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from campaign_dashboard.api.schemas import InfluencerCreate, InfluencerUpdate
from campaign_dashboard.core.errors import NotFoundError
from campaign_dashboard.models.influencer import Influencer

logger = logging.getLogger(__name__)

INFLUENCER_NOT_FOUND = "Influencer not found"


async def create_influencer(db: AsyncSession, data: InfluencerCreate) -> Influencer:
    influencer = Influencer(
        name=data.name,
        follower_count=data.follower_count,
        engagement_rate=data.engagement_rate,
    )
    db.add(influencer)
    await db.commit()
    await db.refresh(influencer)
    logger.info("Influencer created", extra={"influencer_id": influencer.id})
    return influencer


async def get_influencers(db: AsyncSession) -> list[Influencer]:
    result = await db.execute(
        select(Influencer).order_by(Influencer.name.asc(), Influencer.id.asc())
    )
    return list(result.scalars().all())


async def update_influencer(
    db: AsyncSession, influencer_id: int, data: InfluencerUpdate
) -> None:
    changes = data.model_dump(exclude_unset=True)
    if not changes:
        result = await db.execute(select(Influencer.id).where(Influencer.id == influencer_id))
        if result.scalar_one_or_none() is None:
            raise NotFoundError(INFLUENCER_NOT_FOUND)
        return

    result = await db.execute(
        update(Influencer).where(Influencer.id == influencer_id).values(**changes)
    )
    if result.rowcount == 0:
        await db.rollback()
        raise NotFoundError(INFLUENCER_NOT_FOUND)
    await db.commit()
    logger.info(
        "Influencer updated",
        extra={"influencer_id": influencer_id, "fields": sorted(changes)},
    )


async def delete_influencer(db: AsyncSession, influencer_id: int) -> None:
    """Delete an influencer; its campaign assignments cascade in the database."""
    result = await db.execute(delete(Influencer).where(Influencer.id == influencer_id))
    if result.rowcount == 0:
        await db.rollback()
        raise NotFoundError(INFLUENCER_NOT_FOUND)
    await db.commit()
    logger.info("Influencer deleted", extra={"influencer_id": influencer_id})
