from fastapi import APIRouter, Depends, Query

from qris_relay.core.exceptions import AppError, InvalidRequestError
from qris_relay.core.logging import get_logger
from qris_relay.deps import get_saweria_client
from qris_relay.services.saweria import SaweriaClient

router = APIRouter()
log = get_logger(__name__)


@router.get("/balance")
async def check_balance(
    token: str | None = Query(None),
    client: SaweriaClient = Depends(get_saweria_client),
):
    """Account balance for the raw token (no ``Bearer`` prefix)."""
    if not token:
        raise InvalidRequestError("Token is required")
    try:
        balance = await client.fetch_balance(token)
    except AppError as exc:
        log.warning("balance_failed", code=exc.code, error=exc.message)
        raise
    return {"success": True, "balance": balance.to_payload()}
