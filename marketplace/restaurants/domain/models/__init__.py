from .opening_hours import DayOfWeek, OpeningHours
from .restaurant import Restaurant


__all__ = [
    "DayOfWeek",
    "OpeningHours",
    "Restaurant",
]
