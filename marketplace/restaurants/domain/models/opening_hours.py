import re
from dataclasses import dataclass
from datetime import datetime

from django.db import models
from django.utils import timezone

from marketplace.domain.errors import ValidationError

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


class DayOfWeek(models.TextChoices):
    # Ordered to match ``datetime.weekday()``.
    MONDAY = "MONDAY", "Monday"
    TUESDAY = "TUESDAY", "Tuesday"
    WEDNESDAY = "WEDNESDAY", "Wednesday"
    THURSDAY = "THURSDAY", "Thursday"
    FRIDAY = "FRIDAY", "Friday"
    SATURDAY = "SATURDAY", "Saturday"
    SUNDAY = "SUNDAY", "Sunday"


def _minutes(value: str) -> int:
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


@dataclass(frozen=True)
class OpeningHours:
    """Opening window for one day of the week, 24-hour ``HH:MM`` times."""

    day: str
    open_time: str = "00:00"
    close_time: str = "23:59"
    is_closed: bool = False

    def __post_init__(self):
        try:
            object.__setattr__(self, "day", DayOfWeek(str(self.day).upper()))
        except ValueError:
            raise ValidationError(f"Unknown day of week {self.day!r}")

        if self.is_closed:
            return
        if not TIME_PATTERN.match(self.open_time or "") or not TIME_PATTERN.match(self.close_time or ""):
            raise ValidationError("Time must be in HH:MM format (24-hour)")
        if _minutes(self.close_time) <= _minutes(self.open_time):
            raise ValidationError("Close time must be after open time")

    def is_open_at(self, at: datetime) -> bool:
        if self.is_closed:
            return False
        if timezone.is_aware(at):
            at = timezone.localtime(at)
        if DayOfWeek.values[at.weekday()] != self.day:
            return False
        current = at.hour * 60 + at.minute
        return _minutes(self.open_time) <= current < _minutes(self.close_time)

    def to_dict(self) -> dict:
        return {
            "day": str(self.day),
            "open_time": self.open_time,
            "close_time": self.close_time,
            "is_closed": self.is_closed,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "OpeningHours":
        return cls(
            day=data["day"],
            open_time=data.get("open_time", data.get("openTime", "00:00")),
            close_time=data.get("close_time", data.get("closeTime", "23:59")),
            is_closed=data.get("is_closed", data.get("isClosed", False)),
        )
