import datetime

from skyward.util.format import format_clock_time
from .types import VisibilityStatus

RISING_SOON = datetime.timedelta(hours=2)


def _is_night_hour(hour: int) -> bool:
    return hour < 6 or hour >= 18


def classify_visibility(
    altitude_deg: float,
    rise_time: datetime.datetime | None,
    set_time: datetime.datetime | None,
    current_time: datetime.datetime,
    tz: datetime.tzinfo | None = None,
) -> VisibilityStatus:
    """Coarse visibility status; the first matching rule wins.

    ``tz`` selects the wall clock used for the night-time test and for the
    times quoted in messages. ``set_time`` is accepted for symmetry with the
    timing record but does not influence the outcome.
    """
    if current_time.tzinfo is None:
        current_time = current_time.replace(tzinfo=datetime.timezone.utc)
    local_now = current_time.astimezone(tz) if tz is not None else current_time

    if altitude_deg > 0 and _is_night_hour(local_now.hour):
        return VisibilityStatus(
            status="visible",
            badge="Visible Now",
            message="This object is currently visible.",
            background_color="rgba(34, 197, 94, 0.05)",
            border_color="#22c55e",
        )

    if rise_time is not None and current_time < rise_time:
        until_rise = rise_time - current_time
        if until_rise <= RISING_SOON:
            minutes = round(until_rise.total_seconds() / 60.0)
            return VisibilityStatus(
                status="rising",
                badge=f"Rises at {format_clock_time(rise_time, tz)}",
                message=f"This object will rise in {minutes} minutes.",
                background_color="rgba(245, 158, 11, 0.05)",
                border_color="#f59e0b",
            )

    if altitude_deg <= 0:
        if rise_time is not None and rise_time > current_time:
            message = f"Rises at {format_clock_time(rise_time, tz)}"
        else:
            message = "Currently below the horizon."
        return VisibilityStatus(
            status="below",
            badge="Below Horizon",
            message=message,
            background_color="rgba(107, 114, 128, 0.05)",
            border_color="#6b7280",
        )

    return VisibilityStatus(
        status="daylight",
        badge="Daylight Only",
        message="This object is only visible during daylight hours.",
        background_color="rgba(59, 130, 246, 0.05)",
        border_color="#3b82f6",
    )
