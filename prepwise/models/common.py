# prepwise/models/common.py
from datetime import timezone
from typing import Annotated, Literal

from pydantic import StringConstraints

REGULATIONS = ("R19", "R20", "R22")
Regulation = Literal["R19", "R20", "R22"]

EMAIL_PATTERN = r"^\w+([.-]?\w+)*@\w+([.-]?\w+)*(\.\w{2,3})+$"

Text = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
UpperText = Annotated[str, StringConstraints(strip_whitespace=True, to_upper=True, min_length=1)]
Email = Annotated[
    str,
    StringConstraints(strip_whitespace=True, to_lower=True, pattern=EMAIL_PATTERN),
]


def to_naive_utc(value):
    # Mongo hands datetimes back naive (UTC); keep everything in that form
    if value is not None and value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value
