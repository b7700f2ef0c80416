# module boutique.orders.models
"""Modèle Order: créé une seule fois par la réconciliation, jamais modifié ensuite."""
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from boutique.checkout.models import CheckoutSessionSnapshot
from boutique.pricing import to_major_units


class OrderLine(BaseModel):
    model_config = ConfigDict(frozen=True)

    product_id: str
    quantity: int
    unit_price: Decimal  # unités majeures


class Order(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid4()))
    user_id: str
    products: List[OrderLine]
    total_amount: Decimal  # unités majeures, montant réellement payé
    external_session_id: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def from_snapshot(cls, snapshot: CheckoutSessionSnapshot, amount_total: Optional[int] = None) -> "Order":
        """
        Matérialise la commande depuis le snapshot de session.
        - amount_total: montant payé rapporté par Stripe (centimes); à défaut, total du snapshot.
        """
        paid = snapshot.computed_total if amount_total is None else int(amount_total)
        return cls(
            user_id=snapshot.user_id,
            products=[
                OrderLine(product_id=li.product_id, quantity=li.quantity, unit_price=to_major_units(li.unit_price))
                for li in snapshot.line_items
            ],
            total_amount=to_major_units(paid),
            external_session_id=snapshot.external_session_id or "",
        )

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Order":
        data = dict(row)
        data["external_session_id"] = data.pop("stripe_session_id", data.get("external_session_id"))
        return cls.model_validate(data)

    def to_row(self) -> Dict[str, Any]:
        data = self.model_dump(mode="json")
        data["stripe_session_id"] = data.pop("external_session_id")
        return data

    def to_public(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "products": [
                {"productId": p.product_id, "quantity": p.quantity, "price": p.unit_price}
                for p in self.products
            ],
            "totalAmount": self.total_amount,
            "sessionId": self.external_session_id,
            "createdAt": self.created_at.isoformat(),
        }
