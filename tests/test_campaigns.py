"""Tests for campaign service — CRUD, ownership and influencer assignments."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import IntegrityError

from campaign_dashboard.api.schemas import CampaignCreate, CampaignUpdate
from campaign_dashboard.core.errors import ConflictError, NotFoundError, ValidationError
from campaign_dashboard.models.campaign import Campaign
from campaign_dashboard.models.influencer import Influencer
from campaign_dashboard.models.user import User
from campaign_dashboard.services.campaign import (
    assign_influencer,
    create_campaign,
    delete_campaign,
    get_available_influencers,
    get_campaign,
    get_campaigns,
    remove_influencer,
    update_campaign,
)

JAN_1 = datetime(2024, 1, 1, tzinfo=timezone.utc)
FEB_1 = datetime(2024, 2, 1, tzinfo=timezone.utc)


def _make_user(id: str = "user-1") -> User:
    return User(id=id, name="Test User", email=f"{id}@example.com")


def _make_campaign(owner_id: str = "user-1", **overrides) -> Campaign:
    fields = dict(
        owner_id=owner_id,
        title="Launch",
        description="Spring launch",
        budget=1000,
        start_date=JAN_1,
        end_date=FEB_1,
    )
    fields.update(overrides)
    return Campaign(id=5, **fields)


def _result(scalar=None, rowcount: int = 1, items: list | None = None, exists: bool | None = None):
    result = MagicMock()
    result.scalar_one_or_none.return_value = scalar
    result.rowcount = rowcount
    result.scalars.return_value.all.return_value = items or []
    result.scalar.return_value = exists
    return result


def _mock_db(*results):
    db = AsyncMock()
    db.add = MagicMock()
    db.execute = AsyncMock(side_effect=list(results))
    return db


def _params(stmt) -> dict:
    return stmt.compile().params


class TestCreateCampaign:
    @pytest.mark.asyncio
    async def test_creates_campaign(self):
        """Owner should be able to create a campaign."""
        db = _mock_db()
        user = _make_user()
        data = CampaignCreate(
            title="Launch",
            description="Spring launch",
            budget=1000,
            start_date=JAN_1,
            end_date=FEB_1,
        )

        campaign = await create_campaign(db, user, data)
        assert campaign.title == "Launch"
        assert campaign.description == "Spring launch"
        assert campaign.budget == 1000
        assert campaign.owner_id == "user-1"
        db.add.assert_called_once_with(campaign)
        db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_creates_campaign_without_description(self):
        db = _mock_db()
        data = CampaignCreate(title="Minimal", budget=1, start_date=JAN_1, end_date=JAN_1)

        campaign = await create_campaign(db, _make_user(), data)
        assert campaign.description is None
        db.add.assert_called_once()

    @pytest.mark.asyncio
    async def test_rejects_end_before_start(self):
        db = _mock_db()
        data = CampaignCreate(title="Backwards", budget=10, start_date=FEB_1, end_date=JAN_1)

        with pytest.raises(ValidationError) as exc_info:
            await create_campaign(db, _make_user(), data)
        assert exc_info.value.field == "end_date"
        db.add.assert_not_called()
        db.commit.assert_not_awaited()


class TestGetCampaigns:
    @pytest.mark.asyncio
    async def test_returns_empty_list(self):
        db = _mock_db(_result(items=[]))
        assert await get_campaigns(db, "user-1") == []

    @pytest.mark.asyncio
    async def test_scoped_to_owner_newest_first(self):
        c1, c2 = _make_campaign(title="C1"), _make_campaign(title="C2")
        db = _mock_db(_result(items=[c1, c2]))

        results = await get_campaigns(db, "user-1")
        assert results == [c1, c2]

        stmt = db.execute.call_args.args[0]
        sql = str(stmt)
        assert "campaigns.user_id = " in sql
        assert "ORDER BY campaigns.created_at DESC" in sql
        assert "user-1" in _params(stmt).values()


class TestGetCampaign:
    @pytest.mark.asyncio
    async def test_returns_campaign_for_owner(self):
        campaign = _make_campaign()
        db = _mock_db(_result(scalar=campaign))

        result = await get_campaign(db, 5, "user-1")
        assert result is campaign

        params = _params(db.execute.call_args.args[0])
        assert set(params.values()) == {5, "user-1"}

    @pytest.mark.asyncio
    async def test_missing_and_foreign_campaigns_look_the_same(self):
        """Another user's campaign and a nonexistent id raise identical errors."""
        db_missing = _mock_db(_result(scalar=None))
        db_foreign = _mock_db(_result(scalar=None))

        with pytest.raises(NotFoundError) as missing:
            await get_campaign(db_missing, 999, "user-1")
        with pytest.raises(NotFoundError) as foreign:
            await get_campaign(db_foreign, 5, "user-2")

        assert type(missing.value) is type(foreign.value)
        assert missing.value.message == foreign.value.message == "Campaign not found"


class TestUpdateCampaign:
    @pytest.mark.asyncio
    async def test_budget_only_leaves_other_fields_alone(self):
        db = _mock_db(_result(scalar=_make_campaign()), _result(rowcount=1))

        await update_campaign(db, 5, "user-1", CampaignUpdate(budget=500))

        update_stmt = db.execute.call_args_list[1].args[0]
        params = _params(update_stmt)
        assert params["budget"] == 500
        for untouched in ("title", "description", "start_date", "end_date"):
            assert untouched not in params
        db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_description_can_be_cleared(self):
        db = _mock_db(_result(scalar=_make_campaign()), _result(rowcount=1))

        await update_campaign(db, 5, "user-1", CampaignUpdate(description=None))

        update_stmt = db.execute.call_args_list[1].args[0]
        assert "description=" in str(update_stmt)
        assert _params(update_stmt).get("description") is None

    @pytest.mark.asyncio
    async def test_not_owned_raises_404(self):
        db = _mock_db(_result(scalar=None))

        with pytest.raises(NotFoundError):
            await update_campaign(db, 5, "user-2", CampaignUpdate(title="Hijack"))
        assert db.execute.await_count == 1
        db.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_date_range_checked_against_stored_values(self):
        """Moving only the start past the stored end is rejected."""
        db = _mock_db(_result(scalar=_make_campaign()))
        data = CampaignUpdate(start_date=datetime(2024, 3, 1, tzinfo=timezone.utc))

        with pytest.raises(ValidationError):
            await update_campaign(db, 5, "user-1", data)
        assert db.execute.await_count == 1

    @pytest.mark.asyncio
    async def test_concurrently_deleted_row_is_not_found(self):
        db = _mock_db(_result(scalar=_make_campaign()), _result(rowcount=0))

        with pytest.raises(NotFoundError):
            await update_campaign(db, 5, "user-1", CampaignUpdate(budget=10))
        db.rollback.assert_awaited_once()
        db.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_empty_patch_is_a_noop(self):
        db = _mock_db(_result(scalar=_make_campaign()))

        await update_campaign(db, 5, "user-1", CampaignUpdate())
        assert db.execute.await_count == 1
        db.commit.assert_not_awaited()


class TestDeleteCampaign:
    @pytest.mark.asyncio
    async def test_deletes_campaign(self):
        db = _mock_db(_result(rowcount=1))
        await delete_campaign(db, 5, "user-1")

        params = _params(db.execute.call_args.args[0])
        assert set(params.values()) == {5, "user-1"}
        db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_not_owned_raises_404(self):
        db = _mock_db(_result(rowcount=0))

        with pytest.raises(NotFoundError):
            await delete_campaign(db, 5, "user-2")
        db.commit.assert_not_awaited()


class TestAssignInfluencer:
    @pytest.mark.asyncio
    async def test_assigns(self):
        db = _mock_db(
            _result(scalar=5),  # campaign owned
            _result(scalar=7),  # influencer exists
            _result(exists=False),
            _result(),  # insert
        )

        await assign_influencer(db, 5, 7, "user-1")

        insert_stmt = db.execute.call_args_list[3].args[0]
        assert _params(insert_stmt) == {"campaign_id": 5, "influencer_id": 7}
        db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_duplicate_is_conflict(self):
        db = _mock_db(_result(scalar=5), _result(scalar=7), _result(exists=True))

        with pytest.raises(ConflictError):
            await assign_influencer(db, 5, 7, "user-1")
        assert db.execute.await_count == 3
        db.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_racing_duplicate_is_conflict(self):
        db = _mock_db(
            _result(scalar=5),
            _result(scalar=7),
            _result(exists=False),
            IntegrityError("INSERT", {}, Exception("duplicate key")),
        )

        with pytest.raises(ConflictError):
            await assign_influencer(db, 5, 7, "user-1")
        db.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_foreign_campaign_is_not_found(self):
        db = _mock_db(_result(scalar=None))

        with pytest.raises(NotFoundError) as exc_info:
            await assign_influencer(db, 5, 7, "user-2")
        assert exc_info.value.message == "Campaign not found"
        assert db.execute.await_count == 1

    @pytest.mark.asyncio
    async def test_missing_influencer_is_not_found(self):
        db = _mock_db(_result(scalar=5), _result(scalar=None))

        with pytest.raises(NotFoundError) as exc_info:
            await assign_influencer(db, 5, 404, "user-1")
        assert exc_info.value.message == "Influencer not found"


class TestRemoveInfluencer:
    @pytest.mark.asyncio
    async def test_removes(self):
        db = _mock_db(_result(scalar=5), _result(rowcount=1))

        await remove_influencer(db, 5, 7, "user-1")
        delete_stmt = db.execute.call_args_list[1].args[0]
        assert set(_params(delete_stmt).values()) == {5, 7}
        db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_removing_twice_is_a_noop(self):
        db = _mock_db(_result(scalar=5), _result(rowcount=1), _result(scalar=5), _result(rowcount=0))

        await remove_influencer(db, 5, 7, "user-1")
        await remove_influencer(db, 5, 7, "user-1")
        assert db.commit.await_count == 2

    @pytest.mark.asyncio
    async def test_foreign_campaign_is_not_found(self):
        db = _mock_db(_result(scalar=None))

        with pytest.raises(NotFoundError):
            await remove_influencer(db, 5, 7, "user-2")
        db.commit.assert_not_awaited()


class TestAvailableInfluencers:
    @pytest.mark.asyncio
    async def test_excludes_assigned(self):
        ada = Influencer(name="Ada", follower_count=10000, engagement_rate=3.5)
        db = _mock_db(_result(scalar=5), _result(items=[ada]))

        results = await get_available_influencers(db, 5, "user-1")
        assert results == [ada]

        sql = str(db.execute.call_args_list[1].args[0])
        assert "NOT IN" in sql
        assert "campaigns_to_influencers" in sql
        assert "ORDER BY influencers.name ASC" in sql
