"""
Expiry rules applied once, at creation.

Priority: donor-declared date, then product type (cooked +2 days, packed uses
the printed date or +7 days), then +3 days for anything else.
"""
from datetime import datetime, timedelta
from typing import Optional

COOKED_SHELF_LIFE = timedelta(days=2)
PACKED_FALLBACK_SHELF_LIFE = timedelta(days=7)
DEFAULT_SHELF_LIFE = timedelta(days=3)


def calculate_expiry(product_type: Optional[str], package_expiry: Optional[datetime],
                     user_expiry: Optional[datetime], created_at: datetime) -> datetime:
    if user_expiry is not None:
        return user_expiry
    if product_type == "cooked":
        return created_at + COOKED_SHELF_LIFE
    if product_type == "packed":
        if package_expiry is not None:
            return package_expiry
        return created_at + PACKED_FALLBACK_SHELF_LIFE
    return created_at + DEFAULT_SHELF_LIFE
