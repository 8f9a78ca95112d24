"""Delivery address value object."""

from dataclasses import asdict, dataclass
from typing import Optional

from marketplace.domain.errors import ValidationError


@dataclass(frozen=True)
class Address:
    street: str
    city: str
    state: str
    country: str
    zip_code: str
    details: Optional[str] = None

    def __post_init__(self):
        for name in ("street", "city", "country"):
            if not (getattr(self, name) or "").strip():
                raise ValidationError(f"Address {name} is required")

    @classmethod
    def from_dict(cls, data: dict) -> "Address":
        return cls(
            street=data.get("street", ""),
            city=data.get("city", ""),
            state=data.get("state", ""),
            country=data.get("country", ""),
            zip_code=data.get("zip_code", data.get("zipCode", "")),
            details=data.get("details"),
        )

    def to_dict(self) -> dict:
        return asdict(self)

    def __str__(self) -> str:
        address = f"{self.street}, {self.city}, {self.state} {self.zip_code}, {self.country}"
        return f"{address} ({self.details})" if self.details else address
