from typing import Any

from pydantic import BaseModel, ConfigDict


class BalanceSnapshot(BaseModel):
    """Account balance as reported by the platform; fetched on demand, never cached."""
    model_config = ConfigDict(extra="allow")

    available: Any = None
    pending: Any = None
    currency: Any = None
    last_updated: Any = None

    def to_payload(self) -> dict[str, Any]:
        return {**self.model_dump(exclude_unset=True), **(self.model_extra or {})}
