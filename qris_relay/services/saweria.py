"""Saweria donation platform client: create QRIS donation, poll status, read balance.

Each call is one outbound request, no retry and no caching. Responses are
classified here, once: callers get a typed record or one of the
``UpstreamError`` subclasses, never raw upstream text.
"""

from typing import Any, Literal
from urllib.parse import quote

import httpx
from qris_relay.core.exceptions import (
    UpstreamBlocked,
    UpstreamInvalidResponse,
    UpstreamInvalidUser,
    UpstreamTransportError,
    UpstreamUnavailable,
    UpstreamUnexpectedShape,
)
from qris_relay.core.logging import get_logger
from qris_relay.models.balance import BalanceSnapshot
from qris_relay.models.donation import DonationRecord

log = get_logger(__name__)

SAWERIA_API_URL = "https://backend.saweria.co"

BROWSER_HEADERS = {
    "Accept": "*/*",
    "Sec-Fetch-Site": "same-site",
    "Origin": "https://saweria.co",
    "Sec-Fetch-Mode": "cors",
    "User-Agent": (
        "Mozilla/5.0 (iPhone; CPU iPhone OS 18_2 like Mac OS X) AppleWebKit/605.1.15 "
        "(KHTML, like Gecko) Version/18.2 Mobile/15E148 Safari/604.1"
    ),
    "Referer": "https://saweria.co/",
    "Sec-Fetch-Dest": "empty",
    "Accept-Language": "id-ID,id;q=0.9",
    "Priority": "u=3, i",
    "Connection": "keep-alive",
}

# Anonymous donor; the platform requires customer_info on every donation.
DONOR_INFO = {
    "first_name": "Anonymous",
    "email": "no-reply@donation.my.id",
    "phone": "",
}
DONATION_MESSAGE = "Donation via API"
DONATION_CURRENCY = "IDR"

CHALLENGE_MARKERS = ("just a moment...", "cf-browser-verification", "challenge-platform", "cf_chl_")
HTML_MARKERS = ("<!doctype html", "<html")

BLOCKED_MESSAGE = (
    "Request blocked by Cloudflare challenge page; the upstream API rejected this client. "
    "Try again later or from a different network."
)
INVALID_USER_MESSAGE = "Invalid userId: upstream returned an HTML page instead of JSON"

PaymentStatus = Literal["PENDING", "PAID"]


def derive_status(record: DonationRecord) -> PaymentStatus:
    """PENDING while the platform still exposes a QR string, PAID once it is cleared."""
    return "PENDING" if record.qr_string else "PAID"


def build_donation_payload(amount: int) -> dict[str, Any]:
    return {
        "agree": True,
        "notUnderage": True,
        "message": DONATION_MESSAGE,
        "amount": amount,
        "payment_type": "qris",
        "vote": "",
        "currency": DONATION_CURRENCY,
        "customer_info": dict(DONOR_INFO),
    }


def is_challenge_page(response: httpx.Response) -> bool:
    if response.headers.get("cf-mitigated", "").lower() == "challenge":
        return True
    text = response.text.lower()
    return any(marker in text for marker in CHALLENGE_MARKERS)


def is_html_page(text: str) -> bool:
    head = text.lstrip()[:512].lower()
    return any(marker in head for marker in HTML_MARKERS)


def read_json(response: httpx.Response, *, html_means_invalid_user: bool = False) -> Any:
    """Decode a JSON body or raise the error matching what the upstream sent instead."""
    content_type = response.headers.get("content-type", "").lower()
    if "json" not in content_type:
        if is_challenge_page(response):
            raise UpstreamBlocked(BLOCKED_MESSAGE)
        if html_means_invalid_user and is_html_page(response.text):
            raise UpstreamInvalidUser(INVALID_USER_MESSAGE)
        raise UpstreamInvalidResponse(f"API returned non-JSON response: {response.status_code}")
    try:
        return response.json()
    except ValueError as exc:
        raise UpstreamTransportError(f"Invalid JSON from upstream: {exc}") from exc


def _data_field(result: Any) -> Any:
    return result.get("data") if isinstance(result, dict) else None


class SaweriaClient:
    """Async client for the Saweria backend API."""

    def __init__(self, base_url: str = SAWERIA_API_URL, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self.base_url = base_url.rstrip("/")
        self._transport = transport

    async def _request(
        self,
        operation: str,
        method: str,
        path: str,
        headers: dict[str, str],
        json: dict[str, Any] | None = None,
    ) -> httpx.Response:
        # Fresh client per call: requests share no connection state.
        async with httpx.AsyncClient(base_url=self.base_url, transport=self._transport) as client:
            try:
                response = await client.request(method, path, headers=headers, json=json)
            except httpx.HTTPError as exc:
                message = str(exc) or type(exc).__name__
                log.warning("upstream_error", operation=operation, error=message)
                raise UpstreamTransportError(message) from exc
        log.info(
            "upstream_response",
            operation=operation,
            status_code=response.status_code,
            content_type=response.headers.get("content-type"),
        )
        return response

    async def create_donation(self, amount: int, user_id: str) -> DonationRecord:
        """POST an anonymous QRIS donation for ``user_id``; the record must carry a QR string."""
        response = await self._request(
            "create_donation",
            "POST",
            f"/donations/{quote(user_id, safe='')}",
            headers={**BROWSER_HEADERS, "Content-Type": "application/json"},
            json=build_donation_payload(amount),
        )
        data = _data_field(read_json(response, html_means_invalid_user=True))
        if not isinstance(data, dict) or not data.get("qr_string"):
            raise UpstreamUnexpectedShape("Failed to generate QRIS: No QR string in response")
        return DonationRecord.model_validate(data)

    async def fetch_donation_status(self, donation_id: str) -> DonationRecord:
        response = await self._request(
            "fetch_donation_status",
            "GET",
            f"/donations/qris/{quote(donation_id, safe='')}",
            headers={**BROWSER_HEADERS, "Content-Type": "application/json"},
        )
        data = _data_field(read_json(response))
        if not isinstance(data, dict):
            raise UpstreamInvalidResponse("Invalid response structure")
        return DonationRecord.model_validate(data)

    async def fetch_balance(self, token: str) -> BalanceSnapshot:
        """Read the account balance; ``token`` goes out verbatim as the Authorization header."""
        response = await self._request(
            "fetch_balance",
            "GET",
            "/donations/balance",
            headers={**BROWSER_HEADERS, "Authorization": token},
        )
        data = _data_field(read_json(response))
        if not isinstance(data, dict):
            raise UpstreamUnavailable("Failed to fetch balance")
        return BalanceSnapshot.model_validate(data)
