"""
Receipt number generation.
Format: prefix + UTC timestamp to the second + 4 random uppercase alphanumerics, e.g. RCP20240712103015K7QD.
The unique constraint on transactions.receipt_no is the final arbiter.
"""

import secrets
import string
from datetime import datetime, timezone
from typing import Optional

from feedesk.core.config import settings


def generate_receipt_no(prefix: Optional[str] = None, now: Optional[datetime] = None) -> str:
    prefix = (prefix if prefix is not None else settings.receipt_prefix).strip().upper()
    stamp = (now or datetime.now(timezone.utc)).strftime("%Y%m%d%H%M%S")
    alphabet = string.ascii_uppercase + string.digits
    random_part = "".join(secrets.choice(alphabet) for _ in range(4))
    return prefix + stamp + random_part
