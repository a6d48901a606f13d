"""The ``getServerTime`` tool."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable, Mapping
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from api_tutor.types import ToolResult

from ._coerce import string_arg

__all__ = ["get_server_time"]

HUMAN_FORMAT = "%m/%d/%Y, %I:%M:%S %p %Z"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def get_server_time(
    args: Mapping[str, Any], *, now: Callable[[], datetime] = _utcnow
) -> ToolResult:
    tz_name = string_arg(args, "timeZone").strip() or "UTC"
    try:
        zone = ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError, OSError):
        # ValueError: malformed keys such as absolute paths
        # OSError: tz database folders such as "Asia"
        return {"error": f"Invalid timezone: {tz_name}"}

    instant = now().astimezone(timezone.utc)
    local = instant.astimezone(zone)
    return {
        "timeZone": tz_name,
        "iso8601Instant": instant.isoformat(timespec="milliseconds").replace(
            "+00:00", "Z"
        ),
        "humanFormatted": local.strftime(HUMAN_FORMAT),
        "unixSeconds": int(instant.timestamp()),
    }
