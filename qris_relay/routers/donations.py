from typing import Any

from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError

from qris_relay.core.exceptions import AppError, InvalidRequestError
from qris_relay.core.logging import get_logger
from qris_relay.deps import get_saweria_client
from qris_relay.models.donation import DonationRequest
from qris_relay.services import qr as qr_service
from qris_relay.services.saweria import SaweriaClient, derive_status

router = APIRouter()
log = get_logger(__name__)


async def _read_body(request: Request) -> dict[str, Any]:
    try:
        body = await request.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


def parse_donation_request(body: dict[str, Any]) -> DonationRequest:
    """Both fields must be present and truthy before any typed validation."""
    if not body.get("amount") or not body.get("userId"):
        raise InvalidRequestError("Amount and userId are required")
    try:
        return DonationRequest.model_validate(body)
    except ValidationError as exc:
        fields = {str(err["loc"][0]) for err in exc.errors() if err.get("loc")}
        if "amount" in fields:
            raise InvalidRequestError("Amount must be a positive integer") from exc
        raise InvalidRequestError("userId must be a non-empty string") from exc


@router.post("/qris")
async def create_qris(
    request: Request,
    client: SaweriaClient = Depends(get_saweria_client),
):
    """Create a QRIS donation upstream and attach a rendered QR image."""
    donation = parse_donation_request(await _read_body(request))
    try:
        record = await client.create_donation(donation.amount, donation.user_id)
        qr_image = qr_service.to_data_url(record.qr_string)
    except AppError as exc:
        log.warning("qris_failed", user_id=donation.user_id, amount=donation.amount, code=exc.code, error=exc.message)
        raise
    log.info("qris_created", donation_id=record.id, amount=donation.amount)
    return {"success": True, "data": {**record.to_payload(), "qr_image": qr_image}}


@router.get("/status/{donation_id}")
async def check_status(
    donation_id: str,
    client: SaweriaClient = Depends(get_saweria_client),
):
    """Poll a donation; PENDING while it still has a QR string, else PAID."""
    try:
        record = await client.fetch_donation_status(donation_id)
    except AppError as exc:
        log.warning("status_failed", donation_id=donation_id, code=exc.code, error=exc.message)
        raise
    return {"success": True, "status": derive_status(record), "data": record.to_payload()}
