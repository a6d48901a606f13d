"""The ``getRandomNumber`` tool."""

from __future__ import annotations

import math
import random
from datetime import datetime, timezone
from typing import Any, Mapping

from api_tutor.types import ToolResult

from ._coerce import number_arg

__all__ = ["get_random_number"]

_rng = random.SystemRandom()


def get_random_number(
    args: Mapping[str, Any], *, rng: random.Random = _rng
) -> ToolResult:
    """Uniform integer in the inclusive range [min, max] (defaults 0 and 100)."""
    low = number_arg(args, "min", 0)
    high = number_arg(args, "max", 100)
    if low > high:
        return {"error": "Min cannot be greater than max"}

    first, last = math.ceil(low), math.floor(high)
    if first > last:
        return {"error": f"No integer between {low} and {high}"}

    return {
        "min": low,
        "max": high,
        "result": rng.randint(first, last),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
