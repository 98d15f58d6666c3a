"""Tests for order and payment reference generators."""

import re
from unittest.mock import patch

from quickorder.shared.utils.generators import generate_order_id, generate_payment_id


def test_order_ids_are_unique_within_the_same_millisecond() -> None:
    with patch("quickorder.shared.utils.generators.epoch_millis", return_value=1_718_000_000_000):
        ids = [generate_order_id() for _ in range(3)]
    assert len(set(ids)) == 3
    assert all(re.fullmatch(r"ORD-\d{13}", i) for i in ids)
    assert sorted(ids) == ids


def test_payment_reference_format() -> None:
    assert re.fullmatch(r"UPI-\d{13}", generate_payment_id())
