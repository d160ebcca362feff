"""ETA formatting for the tracking screen."""

from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Callable, Optional
from zoneinfo import ZoneInfo

from ..config import settings


def _positive_number(value: object) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number) or number <= 0:
        return None
    return number


class ETACalculator:
    """Turns minute windows or route durations into clock-time strings.

    Clock times are rendered in ``tz`` (``settings.eta_timezone`` by default),
    the customer's zone rather than the server's. A clock returning naive
    datetimes is taken to already be in that zone.
    """

    def __init__(
        self,
        clock: Callable[[], datetime] | None = None,
        time_format: str | None = None,
        placeholder: str | None = None,
        completion_qualifier: str | None = None,
        tz: tzinfo | str | None = None,
    ) -> None:
        tz = tz if tz is not None else settings.eta_timezone
        self.tz = ZoneInfo(tz) if isinstance(tz, str) else tz
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.time_format = time_format or settings.eta_time_format
        self.placeholder = placeholder if placeholder is not None else settings.eta_placeholder
        self.completion_qualifier = (
            completion_qualifier if completion_qualifier is not None else settings.eta_completion_qualifier
        )

    def now(self) -> datetime:
        moment = self.clock()
        if moment.tzinfo is not None:
            return moment.astimezone(self.tz)
        return moment

    def clock_time(self, moment: datetime) -> str:
        text = moment.strftime(self.time_format)
        # 12-hour "09:05 AM" reads better as "9:05 AM"
        if "%I" in self.time_format and text.startswith("0") and text[1:2].isdigit():
            return text[1:]
        return text

    def format(self, eta_min: object, eta_max: object, *, is_on_the_way: bool = False) -> str:
        low = _positive_number(eta_min)
        high = _positive_number(eta_max)
        if low is None or high is None:
            return self.placeholder
        if low > high:
            low, high = high, low

        now = self.now()
        early = self.clock_time(now + timedelta(minutes=low))
        if low == high or is_on_the_way:
            if is_on_the_way and self.completion_qualifier:
                return f"{early} {self.completion_qualifier}"
            return early
        late = self.clock_time(now + timedelta(minutes=high))
        return f"{early} - {late}"

    def format_duration(self, duration_seconds: object, *, is_on_the_way: bool = False) -> str:
        seconds = _positive_number(duration_seconds)
        if seconds is None:
            return self.placeholder
        minutes = max(1, math.ceil(seconds / 60))
        return self.format(minutes, minutes, is_on_the_way=is_on_the_way)


def format_minutes(minutes: object) -> str:
    """Human duration such as "25 mins" or "1 hr 5 mins"."""
    value = _positive_number(minutes)
    if value is None:
        return "Arriving soon"
    if value < 1:
        return "Less than a minute"
    if value < 60:
        rounded = round(value)
        return f"{rounded} min{'s' if rounded != 1 else ''}"

    hours = int(value // 60)
    remaining = round(value % 60)
    if remaining == 60:
        hours, remaining = hours + 1, 0
    hours_text = f"{hours} hr{'s' if hours != 1 else ''}"
    if remaining == 0:
        return hours_text
    return f"{hours_text} {remaining} min{'s' if remaining != 1 else ''}"


def format_window(min_minutes: float, max_minutes: float) -> str:
    return f"{round(min_minutes)}-{round(max_minutes)} mins"
