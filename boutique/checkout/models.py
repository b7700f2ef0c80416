# module boutique.checkout.models
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class SnapshotLine(BaseModel):
    model_config = ConfigDict(frozen=True)

    product_id: str
    quantity: int = Field(ge=1)
    unit_price: int = Field(ge=0)  # centimes, prix unitaire avant remise


class CheckoutSessionSnapshot(BaseModel):
    """
    État figé du panier au moment du checkout.
    Seule source de vérité pour la réconciliation: jamais recalculé depuis le panier courant.
    """

    model_config = ConfigDict(frozen=True)

    external_session_id: Optional[str] = None
    line_items: List[SnapshotLine]
    user_id: str
    applied_coupon_code: Optional[str] = None
    computed_total: int  # centimes, après remise

    def with_session_id(self, session_id: str) -> "CheckoutSessionSnapshot":
        return self.model_copy(update={"external_session_id": session_id})


class CheckoutRequest(BaseModel):
    """Panier brut; products non-liste ou vide -> EmptyCart (400)."""
    model_config = ConfigDict(populate_by_name=True)

    products: Any = None
    coupon_code: Optional[str] = Field(default=None, alias="couponCode")


class ConfirmRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    session_id: str = Field(default="", alias="sessionId")
