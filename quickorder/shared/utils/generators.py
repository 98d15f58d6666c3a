"""ID and value generators (CUIDs, order and payment references)."""

import threading
import time

from cuid2 import cuid_wrapper

cuid_generator = cuid_wrapper()


def generate_cuid() -> str:
    """Generate a collision-resistant unique identifier (CUID2).

    Returns:
        A new CUID string.
    """
    result = cuid_generator()
    if not isinstance(result, str):
        raise TypeError(
            f"Expected str from cuid_generator, got {type(result).__name__}"
        )
    return result


def epoch_millis() -> int:
    """Current wall-clock time in milliseconds since the epoch."""
    return time.time_ns() // 1_000_000


_last_order_millis = 0
_order_id_lock = threading.Lock()


def generate_order_id() -> str:
    """Human-readable order reference, e.g. ORD-1718000000000.

    Strictly increasing within the process: a checkout in the same
    millisecond as the previous one takes the next millisecond.
    """
    global _last_order_millis
    with _order_id_lock:
        _last_order_millis = max(epoch_millis(), _last_order_millis + 1)
        return f"ORD-{_last_order_millis}"


def generate_payment_id() -> str:
    """Reference recorded when a payment is asserted, e.g. UPI-1718000000000."""
    return f"UPI-{epoch_millis()}"
