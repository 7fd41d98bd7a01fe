"""Shared FastAPI dependencies."""

from qris_relay.services.saweria import SaweriaClient


def get_saweria_client() -> SaweriaClient:
    """Dependency: upstream client; overridden in tests with a mock transport."""
    return SaweriaClient()
