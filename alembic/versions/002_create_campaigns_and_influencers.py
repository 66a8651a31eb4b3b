"""create campaigns, influencers and assignments

Revision ID: 002
Revises: 001
Create Date: 2024-05-02 00:10:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "campaigns",
        sa.Column("id", sa.Integer(), autoincrement=True, primary_key=True),
        sa.Column("user_id", sa.Text(), sa.ForeignKey("user.id", ondelete="CASCADE"), nullable=False),
        sa.Column("title", sa.String(256), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("budget", sa.Integer(), nullable=False),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("budget > 0", name="ck_campaigns_budget_positive"),
    )
    op.create_index("ix_campaigns_user_id", "campaigns", ["user_id"])

    op.create_table(
        "influencers",
        sa.Column("id", sa.Integer(), autoincrement=True, primary_key=True),
        sa.Column("name", sa.String(256), nullable=False),
        sa.Column("follower_count", sa.Integer(), nullable=False),
        sa.Column("engagement_rate", sa.Numeric(5, 2), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("follower_count > 0", name="ck_influencers_follower_count_positive"),
        sa.CheckConstraint("engagement_rate >= 0", name="ck_influencers_engagement_rate_non_negative"),
    )
    op.create_index("ix_influencers_name", "influencers", ["name"])

    op.create_table(
        "campaigns_to_influencers",
        sa.Column("campaign_id", sa.Integer(), sa.ForeignKey("campaigns.id", ondelete="CASCADE"), nullable=False),
        sa.Column("influencer_id", sa.Integer(), sa.ForeignKey("influencers.id", ondelete="CASCADE"), nullable=False),
        sa.PrimaryKeyConstraint("campaign_id", "influencer_id"),
    )


def downgrade() -> None:
    op.drop_table("campaigns_to_influencers")
    op.drop_index("ix_influencers_name", table_name="influencers")
    op.drop_table("influencers")
    op.drop_index("ix_campaigns_user_id", table_name="campaigns")
    op.drop_table("campaigns")
