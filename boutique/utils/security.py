"""
Identité de l'appelant (consommation seulement: l'émission des tokens est gérée par Supabase Auth).
- Bearer token prioritaire, cookie de session en repli.
"""
from typing import Any, Dict, Optional

from fastapi import Depends, HTTPException, Request

import boutique.infra.supabase_client as supabase_client

COOKIE_NAME = "sb_access"

def _token_from_request(request: Request) -> Optional[str]:
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        token = auth_header[7:].strip()
        if token:
            return token
    return request.cookies.get(COOKIE_NAME)

def get_user_from_token(access_token: str) -> Dict[str, Any]:
    """Normalise l'utilisateur renvoyé par supabase.auth.get_user(access_token)."""
    res = supabase_client.get_supabase().auth.get_user(access_token)
    user = getattr(res, "user", None)
    metadata = getattr(user, "user_metadata", None) or {}
    return {
        "id": getattr(user, "id", None),
        "email": getattr(user, "email", None),
        "role": "admin" if str(metadata.get("role", "")).lower() == "admin" else "user",
        "token": access_token,
    }

def get_current_user(request: Request) -> Dict[str, Any]:
    token = _token_from_request(request)
    if not token:
        raise HTTPException(status_code=401, detail="Non authentifié")
    try:
        user = get_user_from_token(token)
    except Exception:
        raise HTTPException(status_code=401, detail="Session expirée, veuillez vous connecter")
    if not user.get("id"):
        raise HTTPException(status_code=401, detail="Session expirée, veuillez vous connecter")
    return user

def require_user(user: Dict[str, Any] = Depends(get_current_user)) -> Dict[str, Any]:
    return user
