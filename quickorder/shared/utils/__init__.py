"""Shared utilities: datetime and id generators."""

from quickorder.shared.utils.datetime import ensure_utc, utc_now
from quickorder.shared.utils.generators import (
    epoch_millis,
    generate_cuid,
    generate_order_id,
    generate_payment_id,
)

__all__ = [
    "ensure_utc",
    "epoch_millis",
    "generate_cuid",
    "generate_order_id",
    "generate_payment_id",
    "utc_now",
]
