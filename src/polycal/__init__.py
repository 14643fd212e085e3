"""polycal public API.

Keep this surface small: users should mostly interact with functions re-exported here.
"""

# Initialize registry on import
from . import api_init as _api_init  # noqa: F401

from .api import (
    calendar,
    calendar_info,
    list_calendars,
    make_calendar,
    register_calendar,
    from_epoch_day,
    to_epoch_day,
    from_gregorian,
    to_gregorian,
    convert,
    month_bounds,
    new_year,
    rules,
    week_info,
    encode,
    decode,
)
from .core.errors import (
    PolycalError,
    OutOfRange,
    InvalidDate,
    UnsupportedVariant,
    EraMismatch,
    ResourceFormatError,
)
from .core.types import EastAsianMonth, Leniency, WeekModel

__all__ = [
    "calendar",
    "calendar_info",
    "list_calendars",
    "make_calendar",
    "register_calendar",
    "from_epoch_day",
    "to_epoch_day",
    "from_gregorian",
    "to_gregorian",
    "convert",
    "month_bounds",
    "new_year",
    "rules",
    "week_info",
    "encode",
    "decode",
    "PolycalError",
    "OutOfRange",
    "InvalidDate",
    "UnsupportedVariant",
    "EraMismatch",
    "ResourceFormatError",
    "EastAsianMonth",
    "Leniency",
    "WeekModel",
]
