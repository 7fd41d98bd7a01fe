from qris_relay.models.balance import BalanceSnapshot
from qris_relay.models.donation import DonationRecord, DonationRequest

__all__ = [
    "BalanceSnapshot",
    "DonationRecord",
    "DonationRequest",
]
