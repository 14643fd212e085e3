"""Diagnostics package: small command-line tools run through `polycal diag <tool>`."""

__all__ = ["pretty_month", "new_years_table", "round_trip", "leap_months"]
