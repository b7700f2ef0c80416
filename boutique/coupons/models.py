# module boutique.coupons.models
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel, field_validator


class Coupon(BaseModel):
    """Coupon de réduction nominatif (pourcentage entier, date d'expiration)."""

    code: str
    discount_percentage: int
    expiration_date: datetime
    user_id: str
    is_active: bool = True

    @field_validator("expiration_date")
    @classmethod
    def _aware(cls, v: datetime) -> datetime:
        # Les dates sans fuseau venant de la base sont considérées UTC
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return (now or datetime.now(timezone.utc)) >= self.expiration_date

    def is_valid(self, now: Optional[datetime] = None) -> bool:
        return self.is_active and not self.is_expired(now)

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Coupon":
        return cls.model_validate(row)

    def to_row(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")

    def to_public(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "discountPercentage": self.discount_percentage,
            "expirationDate": self.expiration_date.isoformat(),
            "isActive": self.is_active,
        }


class ValidateCouponRequest(BaseModel):
    code: str = ""
