"""HTTP client for the branch dashboard REST endpoint.

Uses httpx with simple retry + exponential backoff. Separated from the
service layer so the transport can be swapped (tests inject a client built on
``httpx.MockTransport``).
"""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, Optional

import httpx

from config import settings

log = logging.getLogger(__name__)

DASHBOARD_PATH = "/api/dashboard/branch/{branch_id}"


class DashboardHttpError(RuntimeError):
    """Transport-level failure (connection, timeout, non-2xx HTTP status).

    ``message`` carries the server supplied ``status_message`` / ``message``
    when the error body contained one.
    """

    def __init__(self, message: str, *, status: int | None = None, body: Any = None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.body = body


def normalize_envelope(body: Any) -> Dict[str, Any]:
    """Coerce a response body into ``{status_code, status_message, result}``.

    The backend wraps payloads as ``{"status_code": 200, "result": {...}}`` but
    some deployments return ``data`` or the bare object.
    """
    if isinstance(body, dict):
        result = body.get("result")
        if result is None:
            result = body.get("data")
        if result is None:
            result = body
        status = body.get("status_code")
        message = body.get("status_message") or body.get("message") or ""
    else:
        result = None
        status = None
        message = ""
    if status is None and result is not None:
        status = 200
    return {"status_code": status, "status_message": message, "result": result}


def _error_message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        msg = body.get("status_message") or body.get("message")
        if msg:
            return str(msg)
    return f"HTTP {resp.status_code}"


def fetch_dashboard(
    branch_id: str | int,
    period: str,
    *,
    client: Optional[httpx.Client] = None,
    base_url: str | None = None,
    retries: int | None = None,
    backoff_factor: float | None = None,
) -> Dict[str, Any]:
    """GET the dashboard for ``branch_id`` and return the normalized envelope.

    HTTP 4xx responses are not retried; connection errors, timeouts and 5xx
    responses are retried ``retries`` times.
    """
    retries = retries if retries is not None else settings.DEFAULT_RETRIES
    backoff_factor = (
        backoff_factor if backoff_factor is not None else settings.DEFAULT_BACKOFF_FACTOR
    )
    url = (base_url or settings.API_BASE_URL).rstrip("/") + DASHBOARD_PATH.format(
        branch_id=branch_id
    )
    close_client = False
    if client is None:
        client = httpx.Client(timeout=settings.DEFAULT_TIMEOUT)
        close_client = True
    try:
        attempt = 0
        while True:
            attempt += 1
            try:
                resp = client.get(url, params={"period": period})
            except httpx.HTTPError as e:
                if attempt > retries:
                    raise DashboardHttpError(
                        f"Failed to fetch dashboard after {retries} retries: {e}"
                    ) from e
            else:
                if resp.status_code < 400:
                    try:
                        return normalize_envelope(resp.json())
                    except ValueError as e:
                        raise DashboardHttpError(
                            "Dashboard response is not valid JSON", status=resp.status_code
                        ) from e
                if resp.status_code < 500 or attempt > retries:
                    raise DashboardHttpError(_error_message(resp), status=resp.status_code)
            sleep_for = backoff_factor * (2 ** (attempt - 1))
            log.warning(
                "Dashboard fetch attempt %d/%d for branch %s failed; retrying in %.1fs",
                attempt,
                retries,
                branch_id,
                sleep_for,
            )
            time.sleep(sleep_for)
    finally:
        if close_client:
            client.close()


__all__ = ["DashboardHttpError", "fetch_dashboard", "normalize_envelope", "DASHBOARD_PATH"]
