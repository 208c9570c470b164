# fleet/validators.py

"""
Sri Lankan vehicle registration plate formats.

Accepted shapes (after trimming and upper-casing):
- legacy numeric series:  "12 SRI 3456" (1-3 digits, 2-4 letters, 4 digits)
- provincial with dashes: "WP-CAB-1234", "CAB-1234"
- provincial with spaces: "WP CAB 1234", "CAB 1234"
"""

import re

from django.core.exceptions import ValidationError

SL_PLATE_PATTERNS = (
    re.compile(r"^[0-9]{1,3}\s+[A-Z]{2,4}\s+[0-9]{4}$"),
    re.compile(r"^[A-Z]{2,3}-[A-Z]{2,3}-[0-9]{4}$"),
    re.compile(r"^[A-Z]{2,3}\s+[A-Z]{2,3}\s+[0-9]{4}$"),
    re.compile(r"^[A-Z]{2,3}-[0-9]{4}$"),
    re.compile(r"^[A-Z]{2,3}\s+[0-9]{4}$"),
)


def normalize_plate(value) -> str:
    return " ".join(str(value or "").split()).upper()


def is_valid_sl_plate(value) -> bool:
    plate = normalize_plate(value)
    return any(p.match(plate) for p in SL_PLATE_PATTERNS)


def validate_sl_plate(value):
    if not is_valid_sl_plate(value):
        raise ValidationError(
            "Invalid registration number. Use a Sri Lankan format such as "
            "WP-CAB-1234, CAB-1234 or 12 SRI 3456."
        )
