"""Customer-facing tracking numbers: NM-<base36 epoch ms>-<last 4 of id>."""

import string
import time

_BASE36 = string.digits + string.ascii_uppercase


def to_base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(_BASE36[remainder])
    return "".join(reversed(digits))


def generate_tracking_number(application_id: str, now_ms: int | None = None) -> str:
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"NM-{to_base36(now_ms)}-{str(application_id)[-4:].upper()}"
