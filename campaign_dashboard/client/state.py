"""Client-side list, edit and confirmation state for the dashboard views.

Every mutation names the collections it affects in ``MUTATION_EFFECTS``;
after a successful call exactly those are re-fetched through the
``invalidate`` callback. Nothing is refreshed implicitly.
"""

import logging
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any

import httpx

from campaign_dashboard.client.backend import BackendClient
from campaign_dashboard.core.errors import NotFoundError, ServiceError

logger = logging.getLogger(__name__)

CAMPAIGNS = "campaigns"
INFLUENCERS = "influencers"
ALL_CAMPAIGN_DETAILS = "campaign:*"

MUTATION_EFFECTS: dict[str, tuple[str, ...]] = {
    "campaign.create": (CAMPAIGNS,),
    "campaign.update": (CAMPAIGNS, "campaign:{campaign_id}"),
    "campaign.delete": (CAMPAIGNS,),
    "campaign.assignInfluencer": ("campaign:{campaign_id}",),
    "campaign.removeInfluencer": ("campaign:{campaign_id}",),
    "influencer.create": (INFLUENCERS, ALL_CAMPAIGN_DETAILS),
    "influencer.update": (INFLUENCERS, ALL_CAMPAIGN_DETAILS),
    "influencer.delete": (INFLUENCERS, ALL_CAMPAIGN_DETAILS),
}

CAMPAIGN_FIELDS = ("title", "description", "budget", "start_date", "end_date")
INFLUENCER_FIELDS = ("name", "follower_count", "engagement_rate")

Invalidate = Callable[[tuple[str, ...]], Awaitable[None]]


def affected_collections(mutation: str, campaign_id: int | None = None) -> tuple[str, ...]:
    return tuple(key.format(campaign_id=campaign_id) for key in MUTATION_EFFECTS[mutation])


def campaign_key(campaign_id: int) -> str:
    return f"campaign:{campaign_id}"


class FormError(Exception):
    """Local form validation failed; the service is never called."""

    def __init__(self, title: str, message: str):
        super().__init__(message)
        self.title = title
        self.message = message


@dataclass
class Notice:
    """User-visible message (the info modal)."""

    title: str
    message: str


@dataclass
class PendingConfirmation:
    """A destructive action staged until the user confirms it."""

    title: str
    message: str
    confirm_text: str
    run: Callable[[], Awaitable[bool]]


@dataclass
class EditSession:
    target_id: int
    snapshot: dict[str, str]
    drafts: dict[str, str] = field(default_factory=dict)

    def changed(self) -> dict[str, str]:
        return {k: v for k, v in self.drafts.items() if v != self.snapshot.get(k)}


# ---------------------------------------------------------------------------
# Form helpers
# ---------------------------------------------------------------------------


def _form_date(value: Any) -> str:
    """YYYY-MM-DD for a date input, as the UTC calendar day.

    The form posts plain dates, which the API stores as UTC midnight, so
    timestamps carrying any offset are converted to UTC before the day is taken.
    """
    if not value:
        return ""
    if isinstance(value, date) and not isinstance(value, datetime):
        return value.isoformat()
    moment = value if isinstance(value, datetime) else datetime.fromisoformat(str(value))
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).date().isoformat()


def _form_text(value: Any) -> str:
    return "" if value is None else str(value)


def parse_budget(raw: str) -> int:
    try:
        budget = int(str(raw).strip())
    except ValueError:
        budget = 0
    if budget <= 0:
        raise FormError(
            "Invalid Budget", "Please enter a valid, positive number for the budget."
        )
    return budget


def parse_dates(start: str, end: str) -> tuple[date, date]:
    if not start or not end:
        raise FormError(
            "Missing Dates", "Please select both a start and end date for the campaign."
        )
    try:
        start_date, end_date = date.fromisoformat(start), date.fromisoformat(end)
    except ValueError as exc:
        raise FormError("Invalid Date", "Dates must be in YYYY-MM-DD format.") from exc
    if start_date > end_date:
        raise FormError(
            "Invalid Date Range", "The campaign's end date cannot be before its start date."
        )
    return start_date, end_date


def parse_follower_count(raw: str) -> int:
    try:
        count = int(str(raw).strip())
    except ValueError:
        count = 0
    if count <= 0:
        raise FormError("Invalid Followers", "Follower count must be a positive number.")
    return count


def parse_engagement_rate(raw: str) -> Decimal:
    try:
        rate = Decimal(str(raw).strip())
    except InvalidOperation as exc:
        raise FormError("Invalid Engagement", "Engagement rate must be a number.") from exc
    if not rate.is_finite() or rate < 0:
        raise FormError("Invalid Engagement", "Engagement rate cannot be negative.")
    return rate


def campaign_form(campaign: dict) -> dict[str, str]:
    return {
        "title": _form_text(campaign.get("title")),
        "description": _form_text(campaign.get("description")),
        "budget": _form_text(campaign.get("budget")),
        "start_date": _form_date(campaign.get("start_date")),
        "end_date": _form_date(campaign.get("end_date")),
    }


def influencer_form(influencer: dict) -> dict[str, str]:
    return {
        "name": _form_text(influencer.get("name")),
        "follower_count": _form_text(influencer.get("follower_count")),
        "engagement_rate": _form_text(influencer.get("engagement_rate")),
    }


def campaign_changes(changed: dict[str, str], drafts: dict[str, str]) -> dict[str, Any]:
    """Typed update payload holding only the changed campaign fields."""
    payload: dict[str, Any] = {}
    if "title" in changed:
        if not changed["title"].strip():
            raise FormError("Missing Title", "Please enter a campaign title.")
        payload["title"] = changed["title"]
    if "description" in changed:
        # An emptied description clears it
        payload["description"] = changed["description"] or None
    if "budget" in changed:
        payload["budget"] = parse_budget(changed["budget"])
    if "start_date" in changed or "end_date" in changed:
        start_date, end_date = parse_dates(drafts["start_date"], drafts["end_date"])
        if "start_date" in changed:
            payload["start_date"] = start_date
        if "end_date" in changed:
            payload["end_date"] = end_date
    return payload


def influencer_changes(changed: dict[str, str]) -> dict[str, Any]:
    payload: dict[str, Any] = {}
    if "name" in changed:
        if not changed["name"].strip():
            raise FormError("Missing Name", "Please enter the influencer's name.")
        payload["name"] = changed["name"]
    if "follower_count" in changed:
        payload["follower_count"] = parse_follower_count(changed["follower_count"])
    if "engagement_rate" in changed:
        payload["engagement_rate"] = parse_engagement_rate(changed["engagement_rate"])
    return payload


# ---------------------------------------------------------------------------
# States
# ---------------------------------------------------------------------------


REQUEST_ERRORS = (ServiceError, httpx.HTTPError)


def _error_message(exc: Exception) -> str:
    """User-facing text for a failed backend call."""
    if isinstance(exc, ServiceError):
        return exc.message
    if isinstance(exc, httpx.HTTPStatusError):
        if exc.response.status_code == 429:
            return "Too many requests. Please wait a moment and try again."
        return f"The server could not complete the request ({exc.response.status_code})."
    return "Could not reach the server. Please check your connection and try again."


class _ViewState:
    """Backend access, error notice and mutation bookkeeping for one view."""

    def __init__(self, backend: BackendClient, invalidate: Invalidate):
        self.backend = backend
        self.invalidate = invalidate
        self.error: Notice | None = None
        self.busy = False

    async def _mutate(
        self,
        mutation: str,
        call: Callable[[], Awaitable[Any]],
        campaign_id: int | None = None,
        error_title: str = "Request Failed",
    ) -> bool:
        if self.busy:
            return False
        self.busy = True
        try:
            await call()
        except REQUEST_ERRORS as exc:
            message = _error_message(exc)
            logger.warning("%s failed: %s", mutation, message)
            self.error = Notice(error_title, message)
            return False
        finally:
            self.busy = False
        self.error = None
        await self.invalidate(affected_collections(mutation, campaign_id))
        return True


class _EditableState(_ViewState):
    """Edit mode and staged confirmations on top of a view."""

    fields: tuple[str, ...] = ()

    def __init__(self, backend: BackendClient, invalidate: Invalidate):
        super().__init__(backend, invalidate)
        self.editing: EditSession | None = None
        self.pending: PendingConfirmation | None = None

    # -- edit mode ---------------------------------------------------------

    def _form_for(self, entity: dict) -> dict[str, str]:
        raise NotImplementedError

    def start_edit(self, entity: dict) -> None:
        snapshot = self._form_for(entity)
        self.editing = EditSession(
            target_id=entity["id"], snapshot=snapshot, drafts=dict(snapshot)
        )
        self.error = None

    def set_draft(self, name: str, value: str) -> None:
        if self.editing is None:
            raise RuntimeError("Not in edit mode")
        if name not in self.fields:
            raise KeyError(name)
        self.editing.drafts[name] = value

    def cancel_edit(self) -> None:
        self.editing = None

    # -- confirmations -----------------------------------------------------

    def _stage(self, title: str, message: str, run: Callable[[], Awaitable[bool]]) -> None:
        self.pending = PendingConfirmation(
            title=title, message=message, confirm_text="Yes, Delete", run=run
        )

    async def confirm(self) -> bool:
        """Run the staged destructive action. Without one, nothing happens."""
        if self.pending is None:
            return False
        ok = await self.pending.run()
        if ok:
            self.pending = None
        return ok

    def dismiss(self) -> None:
        self.pending = None


class CampaignListState(_ViewState):
    """The campaign list with its create form. Editing happens on the detail view."""

    def __init__(self, backend: BackendClient, invalidate: Invalidate):
        super().__init__(backend, invalidate)
        self.items: list[dict] = []
        self.form: dict[str, str] = dict.fromkeys(CAMPAIGN_FIELDS, "")

    async def load(self) -> None:
        try:
            self.items = await self.backend.list_campaigns()
        except REQUEST_ERRORS as exc:
            self.error = Notice("Loading Failed", _error_message(exc))

    def set_form(self, name: str, value: str) -> None:
        if name not in CAMPAIGN_FIELDS:
            raise KeyError(name)
        self.form[name] = value

    async def submit_create(self) -> bool:
        try:
            if not self.form["title"].strip():
                raise FormError("Missing Title", "Please enter a campaign title.")
            budget = parse_budget(self.form["budget"])
            start_date, end_date = parse_dates(self.form["start_date"], self.form["end_date"])
        except FormError as exc:
            self.error = Notice(exc.title, exc.message)
            return False

        payload = {
            "title": self.form["title"],
            "description": self.form["description"] or None,
            "budget": budget,
            "start_date": start_date,
            "end_date": end_date,
        }
        ok = await self._mutate(
            "campaign.create",
            lambda: self.backend.create_campaign(payload),
            error_title="Creation Failed",
        )
        if ok:
            self.form = dict.fromkeys(CAMPAIGN_FIELDS, "")
        return ok


class CampaignDetailState(_EditableState):
    """One campaign with its assigned influencers and the assignment picker."""

    fields = CAMPAIGN_FIELDS

    def __init__(self, backend: BackendClient, invalidate: Invalidate, campaign_id: int):
        super().__init__(backend, invalidate)
        self.campaign_id = campaign_id
        self.campaign: dict | None = None
        self.available_influencers: list[dict] = []
        self.deleted = False

    def _form_for(self, entity: dict) -> dict[str, str]:
        return campaign_form(entity)

    @property
    def assigned_influencers(self) -> list[dict]:
        return list(self.campaign.get("influencers", [])) if self.campaign else []

    async def load(self) -> None:
        try:
            self.campaign = await self.backend.get_campaign(self.campaign_id)
            self.available_influencers = await self.backend.list_available_influencers(
                self.campaign_id
            )
        except NotFoundError as exc:
            self.campaign = None
            self.available_influencers = []
            self.error = Notice("Not Found", exc.message)
        except REQUEST_ERRORS as exc:
            self.error = Notice("Loading Failed", _error_message(exc))

    def edit(self) -> None:
        if self.campaign is None:
            raise RuntimeError("Campaign is not loaded")
        self.start_edit(self.campaign)

    async def submit_edit(self) -> bool:
        """Send only the changed fields; stay in edit mode on failure."""
        if self.editing is None:
            return False
        try:
            changes = campaign_changes(self.editing.changed(), self.editing.drafts)
        except FormError as exc:
            self.error = Notice(exc.title, exc.message)
            return False
        if not changes:
            self.editing = None
            return True

        ok = await self._mutate(
            "campaign.update",
            lambda: self.backend.update_campaign(self.campaign_id, changes),
            campaign_id=self.campaign_id,
            error_title="Update Failed",
        )
        if ok:
            self.editing = None
        return ok

    def request_delete(self) -> None:
        self._stage(
            "Delete Campaign",
            "Are you sure you want to permanently delete this campaign? "
            "This action cannot be undone.",
            self._delete,
        )

    async def _delete(self) -> bool:
        ok = await self._mutate(
            "campaign.delete",
            lambda: self.backend.delete_campaign(self.campaign_id),
            error_title="Delete Failed",
        )
        if ok:
            self.deleted = True
            self.campaign = None
            self.editing = None
        return ok

    async def assign(self, influencer_id: int) -> bool:
        return await self._mutate(
            "campaign.assignInfluencer",
            lambda: self.backend.assign_influencer(self.campaign_id, influencer_id),
            campaign_id=self.campaign_id,
            error_title="Assignment Failed",
        )

    def request_remove(self, influencer: dict) -> None:
        influencer_id = influencer["id"]

        async def run() -> bool:
            return await self._mutate(
                "campaign.removeInfluencer",
                lambda: self.backend.remove_influencer(self.campaign_id, influencer_id),
                campaign_id=self.campaign_id,
                error_title="Remove Failed",
            )

        self._stage(
            "Remove Influencer",
            f"Remove {influencer.get('name', 'this influencer')} from the campaign?",
            run,
        )


class InfluencerListState(_EditableState):
    """The shared influencer list with its create form."""

    fields = INFLUENCER_FIELDS

    def __init__(self, backend: BackendClient, invalidate: Invalidate):
        super().__init__(backend, invalidate)
        self.items: list[dict] = []
        self.form: dict[str, str] = dict.fromkeys(INFLUENCER_FIELDS, "")

    def _form_for(self, entity: dict) -> dict[str, str]:
        return influencer_form(entity)

    async def load(self) -> None:
        try:
            self.items = await self.backend.list_influencers()
        except REQUEST_ERRORS as exc:
            self.error = Notice("Loading Failed", _error_message(exc))

    def set_form(self, name: str, value: str) -> None:
        if name not in INFLUENCER_FIELDS:
            raise KeyError(name)
        self.form[name] = value

    async def submit_create(self) -> bool:
        try:
            if not self.form["name"].strip():
                raise FormError("Missing Name", "Please enter the influencer's name.")
            payload = {
                "name": self.form["name"],
                "follower_count": parse_follower_count(self.form["follower_count"]),
                "engagement_rate": parse_engagement_rate(self.form["engagement_rate"]),
            }
        except FormError as exc:
            self.error = Notice(exc.title, exc.message)
            return False

        ok = await self._mutate(
            "influencer.create",
            lambda: self.backend.create_influencer(payload),
            error_title="Creation Failed",
        )
        if ok:
            self.form = dict.fromkeys(INFLUENCER_FIELDS, "")
        return ok

    async def submit_edit(self) -> bool:
        if self.editing is None:
            return False
        try:
            changes = influencer_changes(self.editing.changed())
        except FormError as exc:
            self.error = Notice(exc.title, exc.message)
            return False
        if not changes:
            self.editing = None
            return True

        influencer_id = self.editing.target_id
        ok = await self._mutate(
            "influencer.update",
            lambda: self.backend.update_influencer(influencer_id, changes),
            error_title="Update Failed",
        )
        if ok:
            self.editing = None
        return ok

    def request_delete(self, influencer: dict) -> None:
        influencer_id = influencer["id"]

        async def run() -> bool:
            return await self._mutate(
                "influencer.delete",
                lambda: self.backend.delete_influencer(influencer_id),
                error_title="Delete Failed",
            )

        self._stage(
            "Delete Influencer",
            f"Are you sure you want to delete {influencer.get('name', 'this influencer')}? "
            "They will be removed from every campaign.",
            run,
        )


class Dashboard:
    """Wires the view states together and routes invalidations to them."""

    def __init__(self, backend: BackendClient | None = None):
        self.backend = backend or BackendClient()
        self.campaigns = CampaignListState(self.backend, self.invalidate)
        self.influencers = InfluencerListState(self.backend, self.invalidate)
        self.details: dict[int, CampaignDetailState] = {}

    async def open_campaign(self, campaign_id: int) -> CampaignDetailState:
        detail = self.details.get(campaign_id)
        if detail is None or detail.deleted:
            detail = CampaignDetailState(self.backend, self.invalidate, campaign_id)
            self.details[campaign_id] = detail
        await detail.load()
        return detail

    async def invalidate(self, keys: Iterable[str]) -> None:
        keys = tuple(keys)
        if CAMPAIGNS in keys:
            await self.campaigns.load()
        if INFLUENCERS in keys:
            await self.influencers.load()
        for campaign_id, detail in list(self.details.items()):
            if detail.deleted:
                self.details.pop(campaign_id)
                continue
            if ALL_CAMPAIGN_DETAILS in keys or campaign_key(campaign_id) in keys:
                await detail.load()
