from decimal import Decimal

from sqlalchemy import CheckConstraint, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from campaign_dashboard.db.base import Base, IdMixin, TimestampMixin


class Influencer(IdMixin, TimestampMixin, Base):
    __tablename__ = "influencers"
    __table_args__ = (
        CheckConstraint("follower_count > 0", name="ck_influencers_follower_count_positive"),
        CheckConstraint("engagement_rate >= 0", name="ck_influencers_engagement_rate_non_negative"),
    )

    name: Mapped[str] = mapped_column(String(256), nullable=False, index=True)
    follower_count: Mapped[int] = mapped_column(Integer, nullable=False)
    # Exact decimal, 5 digits with 2 after the point (0.00 .. 999.99)
    engagement_rate: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False)
