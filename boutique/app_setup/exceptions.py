"""
Gestionnaire d'exceptions HTTP.
- Rend toutes les HTTPException en JSON {"detail": ...}, enrichi de "code" pour les
  erreurs du checkout (EmptyCart, InvalidCoupon, PaymentNotConfirmed, ...).
"""
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from boutique.errors import CheckoutError, PaymentNotConfirmed

def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(HTTPException)
    async def http_error_as_json(request: Request, exc: HTTPException):
        content = {"detail": exc.detail}
        if isinstance(exc, CheckoutError):
            content["code"] = exc.code
        if isinstance(exc, PaymentNotConfirmed):
            content["payment_status"] = exc.payment_status
        return JSONResponse(status_code=exc.status_code, content=content, headers=getattr(exc, "headers", None))
