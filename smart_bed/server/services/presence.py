"""
Bed Presence Service
====================
Tracks whether someone is lying on the left and/or right side of the bed.

Each side is fed independently by its own sensor zone. A reading goes stale
once it is older than the configured timeout; stale or never-written sides
are "unavailable" when both sides are merged into one in-bed signal.
"""

import logging
import threading
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from .. import server_config as config

logger = logging.getLogger("Presence")

SIDES = ("left", "right")
NEVER = "never"
UNAVAILABLE = "unavailable"

# Marks a side the caller did not supply (None is a supplied, invalid value)
UNSET = object()


class ValidationError(Exception):
    """Caller supplied a malformed presence update."""

    def __init__(self, error, message):
        super().__init__(f"{error}: {message}")
        self.error = error
        self.message = message

    def to_dict(self):
        return {"error": self.error, "message": self.message}


@dataclass(frozen=True)
class ZoneReading:
    """Last known state of one side. Both fields are None until the first write."""

    present: Optional[bool] = None
    last_updated_at: Optional[float] = None  # epoch seconds


# --- Helpers ---
def is_stale(last_updated_at, now, stale_timeout_ms):
    if last_updated_at is None:
        return True
    return (now - last_updated_at) * 1000 > stale_timeout_ms


def format_timestamp(last_updated_at, tz):
    """ISO-8601 with offset, seconds precision, e.g. 2026-10-19T08:15:00-04:00"""
    if last_updated_at is None:
        return NEVER
    moment = datetime.fromtimestamp(last_updated_at, tz=timezone.utc).astimezone(tz)
    return moment.replace(microsecond=0).isoformat()


def to_epoch_ms(last_updated_at):
    if last_updated_at is None:
        return None
    return int(last_updated_at * 1000)


def zone_available(reading, now, stale_timeout_ms):
    return reading.present is not None and not is_stale(
        reading.last_updated_at, now, stale_timeout_ms
    )


def format_zone(reading, now, stale_timeout_ms, tz):
    # Stale sides still report their last known value
    return {
        "present": bool(reading.present),
        "isStale": is_stale(reading.last_updated_at, now, stale_timeout_ms),
        "lastUpdatedAt": format_timestamp(reading.last_updated_at, tz),
    }


def merge_zones(values):
    """
    Merge per-side values into one in-bed signal.

    `values` maps side -> bool, or None for a side that is unavailable.
    Unknown is kept distinct from empty: no available side gives UNAVAILABLE,
    otherwise any available side reporting presence gives True.
    """
    available = [v for v in values.values() if v is not None]
    if not available:
        return UNAVAILABLE
    return any(available)


class PresenceStore:
    def __init__(self, stale_timeout_ms=None, clock=time.time, tz=None):
        if stale_timeout_ms is None:
            stale_timeout_ms = config.STALE_TIMEOUT_MS
        self.stale_timeout_ms = stale_timeout_ms
        self.clock = clock
        self.tz = tz if tz is not None else ZoneInfo(config.TIMEZONE)
        self._lock = threading.Lock()
        self._zones = {side: ZoneReading() for side in SIDES}

    def update_presence(self, left=UNSET, right=UNSET):
        """
        Record presence for one or both sides.

        Both values are checked before anything changes, so a rejected call
        leaves the state untouched. Returns the full state after the update.
        """
        updates = {side: value for side, value in zip(SIDES, (left, right)) if value is not UNSET}
        if not updates:
            raise ValidationError(
                "At least one side (left or right) must be specified",
                'Please provide "left" and/or "right" with boolean values',
            )
        for side, value in updates.items():
            if not isinstance(value, bool):
                raise ValidationError(
                    f"Invalid value for {side}",
                    "Value must be a boolean (true or false)",
                )

        with self._lock:
            now = self.clock()
            for side, value in updates.items():
                self._zones[side] = ZoneReading(present=value, last_updated_at=now)
            zones = dict(self._zones)

        logger.debug(f"Presence updated: {updates}")
        return {
            "left": zones["left"].present,
            "right": zones["right"].present,
            "lastUpdated": {side: to_epoch_ms(zones[side].last_updated_at) for side in SIDES},
        }

    def get_presence(self, side=None):
        """Formatted view of one side, or the merged view for anything else."""
        with self._lock:
            zones = dict(self._zones)
        now = self.clock()

        if side in SIDES:
            return format_zone(zones[side], now, self.stale_timeout_ms, self.tz)

        details = {}
        for name, reading in zones.items():
            if zone_available(reading, now, self.stale_timeout_ms):
                details[name] = reading.present
            else:
                details[name] = None

        return {
            "side": "all",
            "presence": merge_zones(details),
            "details": {
                name: UNAVAILABLE if value is None else value
                for name, value in details.items()
            },
            "lastUpdated": {
                name: format_timestamp(reading.last_updated_at, self.tz)
                for name, reading in zones.items()
            },
        }
