"""Utility helpers for nonce chat."""

from .timestamps import isoformat_utc, utc_now_iso

__all__ = [
    "isoformat_utc",
    "utc_now_iso",
]
