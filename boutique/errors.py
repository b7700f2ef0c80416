"""
Taxonomie des erreurs du checkout.

Toutes dérivent de HTTPException: les services les lèvent directement et les routers
les laissent remonter; le handler global (app_setup.exceptions) les rend en JSON
{"detail": ..., "code": ...}.
- Erreurs corrigeables par l'appelant: EmptyCart, InvalidCoupon (4xx).
- Erreurs fournisseur/stockage: PaymentProviderError, StoreUnavailable (5xx, rejouables).
- PaymentNotConfirmed: la session existe mais n'est pas payée.
- DuplicateOrder: conflit d'unicité sur la session, résolu en interne par la réconciliation.
"""
from typing import Optional
from fastapi import HTTPException


class CheckoutError(HTTPException):
    status_code = 400
    code = "checkout_error"
    default_detail = "Erreur de checkout"

    def __init__(self, detail: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(status_code=status_code or self.status_code, detail=detail or self.default_detail)


class EmptyCart(CheckoutError):
    code = "empty_cart"
    default_detail = "Invalid or empty products array"


class InvalidCoupon(CheckoutError):
    status_code = 404
    code = "invalid_coupon"
    default_detail = "Coupon not found"


class PaymentProviderError(CheckoutError):
    status_code = 502
    code = "payment_provider_error"
    default_detail = "Payment provider unavailable"


class PaymentNotConfirmed(CheckoutError):
    status_code = 409
    code = "payment_not_confirmed"

    def __init__(self, payment_status: str):
        self.payment_status = payment_status or ""
        super().__init__(detail=f"Payment not confirmed (payment_status={self.payment_status})")


class SessionOwnershipError(CheckoutError):
    status_code = 403
    code = "session_forbidden"
    default_detail = "Checkout session belongs to another user"


class StoreUnavailable(CheckoutError):
    status_code = 503
    code = "store_unavailable"
    default_detail = "Persistent store unavailable, retry later"


class DuplicateOrder(CheckoutError):
    status_code = 409
    code = "duplicate_order"

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(detail=f"Order already exists for session {session_id}")
