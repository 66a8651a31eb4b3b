from sqlalchemy import ForeignKey, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship

from campaign_dashboard.db.base import Base


class CampaignInfluencer(Base):
    """Junction row: influencer assigned to a campaign.

    The composite primary key allows at most one row per pair; both
    foreign keys cascade so deleting either side drops the assignment.
    """

    __tablename__ = "campaigns_to_influencers"

    campaign_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("campaigns.id", ondelete="CASCADE"), primary_key=True
    )
    influencer_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("influencers.id", ondelete="CASCADE"), primary_key=True
    )

    # Relationships
    campaign = relationship("Campaign", viewonly=True)
    influencer = relationship("Influencer", viewonly=True)
