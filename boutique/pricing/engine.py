"""
Moteur de prix (pur, sans DB ni Stripe).
- Tous les montants sont en centimes (int) pour éviter les dérives des flottants.
- Les conversions vers/depuis les unités majeures passent par Decimal (arrondi demi-supérieur).
"""
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Iterable, Optional

from pydantic import BaseModel, Field

from boutique.coupons.models import Coupon

CENT = Decimal("0.01")

# module boutique.pricing.engine
class CartItem(BaseModel):
    product_id: str
    quantity: int = Field(ge=1)
    unit_price: int = Field(ge=0)  # centimes

    @property
    def line_total(self) -> int:
        return self.unit_price * self.quantity


class PriceBreakdown(BaseModel):
    subtotal: int
    discount: int = 0
    total: int
    coupon_applied: bool = False

    def to_public(self) -> Dict[str, Any]:
        """Vue 'client' en unités majeures (ex: dollars)."""
        return {
            "subtotal": to_major_units(self.subtotal),
            "discount": to_major_units(self.discount),
            "total": to_major_units(self.total),
            "couponApplied": self.coupon_applied,
        }


def to_minor_units(amount: Any) -> int:
    """
    Convertit un prix en unités majeures (str|int|float|Decimal) en centimes.
    - Passe par str() pour ne pas hériter de l'imprécision binaire des float (19.99 -> 1999).
    - Lève ValueError si la valeur n'est pas numérique.
    """
    try:
        value = Decimal(str(amount))
    except Exception as e:
        raise ValueError(f"Prix invalide: {amount!r}") from e
    if not value.is_finite():
        raise ValueError(f"Prix invalide: {amount!r}")
    return int((value * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def to_major_units(minor: int) -> Decimal:
    return (Decimal(int(minor)) / 100).quantize(CENT)


def percentage_of(amount: int, percentage: int) -> int:
    """round(amount * percentage / 100), demi vers le haut, en arithmétique entière."""
    return (amount * percentage + 50) // 100


def subtotal_of(items: Iterable[CartItem]) -> int:
    return sum(item.line_total for item in items)


def price(
    items: Iterable[CartItem],
    coupon: Optional[Coupon] = None,
    coupon_applied: bool = False,
    now: Optional[datetime] = None,
) -> PriceBreakdown:
    """
    Calcule {subtotal, discount, total}.
    - La remise ne s'applique que si coupon_applied et si le coupon est valide
      (actif, non expiré, pourcentage dans [0, 100]).
    - Sinon total == subtotal.
    """
    subtotal = subtotal_of(items)
    if (
        coupon_applied
        and coupon is not None
        and coupon.is_valid(now)
        and 0 <= coupon.discount_percentage <= 100
    ):
        discount = percentage_of(subtotal, coupon.discount_percentage)
        return PriceBreakdown(subtotal=subtotal, discount=discount, total=subtotal - discount, coupon_applied=True)
    return PriceBreakdown(subtotal=subtotal, total=subtotal)
