"""Utility functions."""

from consent_portal.utils.time import date_stamp, ensure_utc, format_datetime, utc_now

__all__ = ["utc_now", "ensure_utc", "format_datetime", "date_stamp"]
