from typing import Any

from pydantic import BaseModel, ConfigDict, Field, PositiveInt


class DonationRequest(BaseModel):
    """Inbound ``POST /qris`` body; built per call, never stored."""
    amount: PositiveInt
    user_id: str = Field(alias="userId", min_length=1)


class DonationRecord(BaseModel):
    """Upstream-owned donation snapshot.

    Extra fields are kept so the record is relayed exactly as the platform
    sent it. ``qr_string`` is present while unpaid and cleared once paid.
    """
    model_config = ConfigDict(extra="allow")

    # Any: the platform owns these types; they are relayed, not checked.
    id: Any = None
    amount: Any = None
    currency: Any = None
    qr_string: Any = None
    paid_at: Any = None
    created_at: Any = None

    def to_payload(self) -> dict[str, Any]:
        """Fields the upstream actually sent, declared and extra alike."""
        return {**self.model_dump(exclude_unset=True), **(self.model_extra or {})}
