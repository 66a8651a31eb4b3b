"""Thin httpx wrapper around the dashboard API.

Error responses are turned back into the same exceptions the services
raise, so callers handle one taxonomy on both sides of the wire.
"""

import logging
from typing import Any

import httpx
from pydantic_core import to_jsonable_python
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from campaign_dashboard.client.config import settings
from campaign_dashboard.core.errors import (
    ConflictError,
    NotFoundError,
    UnauthenticatedError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def _error_from_response(resp: httpx.Response) -> Exception | None:
    detail: Any = ""
    try:
        detail = resp.json().get("detail", "")
    except (ValueError, AttributeError):
        detail = resp.text

    if resp.status_code == 422:
        # FastAPI validation errors: [{"loc": [...], "msg": "..."}]
        if isinstance(detail, list) and detail:
            first = detail[0]
            loc = first.get("loc") or []
            field = str(loc[-1]) if len(loc) > 1 else None
            return ValidationError(first.get("msg", "Invalid input"), field=field)
        return ValidationError(str(detail) or "Invalid input")
    if resp.status_code == 401:
        return UnauthenticatedError(str(detail) or "Not authenticated")
    if resp.status_code == 404:
        return NotFoundError(str(detail) or "Not found")
    if resp.status_code == 409:
        return ConflictError(str(detail) or "Conflict")
    return None


class BackendClient:
    """One coroutine per API operation.

    ``transport`` is passed through to httpx, which lets tests swap in an
    ``httpx.MockTransport`` or an ``ASGITransport``.
    """

    def __init__(
        self,
        base_url: str | None = None,
        session_token: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = f"{(base_url or settings.backend_url).rstrip('/')}/api"
        self.session_token = session_token if session_token is not None else settings.session_token
        self.timeout = timeout or settings.timeout
        self.transport = transport

    async def _send(self, method: str, path: str, json: Any = None) -> httpx.Response:
        headers = {}
        if self.session_token:
            headers["Authorization"] = f"Bearer {self.session_token}"
        async with httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self.transport,
        ) as client:
            return await client.request(
                method,
                path,
                json=to_jsonable_python(json) if json is not None else None,
                headers=headers,
            )

    @retry(
        retry=retry_if_exception_type(httpx.TransportError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.2, max=2),
        reraise=True,
    )
    async def _get(self, path: str) -> httpx.Response:
        """GET with retry on connection errors. Mutations are never retried."""
        return await self._send("GET", path)

    async def _request(self, method: str, path: str, json: Any = None) -> Any:
        if method == "GET":
            resp = await self._get(path)
        else:
            resp = await self._send(method, path, json)
        if resp.is_success:
            if resp.status_code == 204 or not resp.content:
                return None
            return resp.json()

        logger.warning("%s %s failed: %s %s", method, path, resp.status_code, resp.text)
        exc = _error_from_response(resp)
        if exc is not None:
            raise exc
        resp.raise_for_status()

    # -- campaigns ---------------------------------------------------------

    async def list_campaigns(self) -> list[dict]:
        return await self._request("GET", "/campaigns")

    async def get_campaign(self, campaign_id: int) -> dict:
        return await self._request("GET", f"/campaigns/{campaign_id}")

    async def create_campaign(self, payload: dict) -> dict:
        return await self._request("POST", "/campaigns", json=payload)

    async def update_campaign(self, campaign_id: int, changes: dict) -> None:
        await self._request("PATCH", f"/campaigns/{campaign_id}", json=changes)

    async def delete_campaign(self, campaign_id: int) -> None:
        await self._request("DELETE", f"/campaigns/{campaign_id}")

    async def assign_influencer(self, campaign_id: int, influencer_id: int) -> None:
        await self._request(
            "POST",
            f"/campaigns/{campaign_id}/influencers",
            json={"influencer_id": influencer_id},
        )

    async def remove_influencer(self, campaign_id: int, influencer_id: int) -> None:
        await self._request("DELETE", f"/campaigns/{campaign_id}/influencers/{influencer_id}")

    async def list_available_influencers(self, campaign_id: int) -> list[dict]:
        return await self._request("GET", f"/campaigns/{campaign_id}/available-influencers")

    # -- influencers -------------------------------------------------------

    async def list_influencers(self) -> list[dict]:
        return await self._request("GET", "/influencers")

    async def create_influencer(self, payload: dict) -> dict:
        return await self._request("POST", "/influencers", json=payload)

    async def update_influencer(self, influencer_id: int, changes: dict) -> None:
        await self._request("PATCH", f"/influencers/{influencer_id}", json=changes)

    async def delete_influencer(self, influencer_id: int) -> None:
        await self._request("DELETE", f"/influencers/{influencer_id}")
