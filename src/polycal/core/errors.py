class PolycalError(Exception):
    """Base error."""

class OutOfRange(PolycalError, ValueError):
    """Raised when an epoch-day or field value lies outside a calendar's supported span."""

class InvalidDate(PolycalError, ValueError):
    """Raised for well-formed fields that do not denote a real date (e.g. day 30 in a 29-day month)."""

class UnsupportedVariant(PolycalError, KeyError):
    """Raised for an unknown or malformed calendar variant string."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the message readable.
        return str(self.args[0]) if self.args else ""

class EraMismatch(PolycalError, ValueError):
    """Raised under strict leniency when the supplied era differs from the computed one."""

class ResourceFormatError(PolycalError, ValueError):
    """Raised when a month-length data table is malformed. Always raised at load time."""
