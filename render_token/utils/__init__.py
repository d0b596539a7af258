"""Utility helpers for time operations."""

from .time import Clock, epoch_millis, utc_now

__all__ = ["Clock", "epoch_millis", "utc_now"]
