"""HTTP plan repository for the sync boundary.

Endpoints:
    GET    /v1/plans/active  → plan document, or 404 when no plan is active
    PUT    /v1/plans/{id}    → store the document and make it active
    DELETE /v1/plans/{id}    → remove the plan (404 is treated as already gone)
"""

from __future__ import annotations

import logging
import uuid

import httpx

from .errors import PersistenceError, PlanDocumentError
from .models import MesocyclePlan
from .serialization import plan_from_document, plan_to_document

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class HttpPlanRepository:
    def __init__(
        self,
        base_url: str,
        api_key: str,
        client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "HttpPlanRepository":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            return await self._client.request(method, path, headers=self._headers, **kwargs)
        except httpx.HTTPError as exc:
            raise PersistenceError(f"{method} {path} failed: {exc}") from exc

    @staticmethod
    def _raise_for_status(resp: httpx.Response, action: str) -> None:
        if resp.status_code >= 400:
            raise PersistenceError(
                f"{action}: HTTP {resp.status_code}: {resp.text[:200]}",
                status_code=resp.status_code,
            )

    async def fetch_active_plan(self) -> MesocyclePlan | None:
        resp = await self._request("GET", "/v1/plans/active")
        if resp.status_code == 404:
            return None
        self._raise_for_status(resp, "fetching active plan")
        try:
            doc = resp.json()
        except ValueError as exc:
            raise PlanDocumentError(f"active plan response is not valid JSON: {exc}") from exc
        return plan_from_document(doc)

    async def save(self, plan: MesocyclePlan) -> None:
        resp = await self._request("PUT", f"/v1/plans/{plan.id}", json=plan_to_document(plan))
        self._raise_for_status(resp, f"saving plan {plan.id}")
        logger.info(
            "Synced plan %s (generation %d)",
            plan.id,
            plan.generation,
            extra={"mesoplan_plan_id": str(plan.id)},
        )

    async def delete(self, plan_id: uuid.UUID) -> None:
        resp = await self._request("DELETE", f"/v1/plans/{plan_id}")
        if resp.status_code == 404:
            return
        self._raise_for_status(resp, f"deleting plan {plan_id}")
