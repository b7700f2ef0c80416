"""
Cas d'usage 'coupons'.
- validate / require_valid: recherche {code, user_id, actif} et évalue l'expiration à la lecture.
- apply_coupon_to: applique la remise via le moteur de prix.
- auto_issue: remplace le coupon de l'utilisateur par un coupon cadeau (10%, 30 jours).
- deactivate: transition actif -> inactif, idempotente.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional
import logging
import secrets
import string

from boutique import config
from boutique.coupons import repository
from boutique.coupons.models import Coupon
from boutique.errors import InvalidCoupon
from boutique.pricing import percentage_of

logger = logging.getLogger(__name__)

_CODE_ALPHABET = string.ascii_uppercase + string.digits

def generate_code(length: int = 8) -> str:
    """Code aléatoire type GIFTX7K2P9QA (préfixe configurable)."""
    return config.COUPON_CODE_PREFIX + "".join(secrets.choice(_CODE_ALPHABET) for _ in range(length))

def require_valid(code: str, user_id: str, now: Optional[datetime] = None) -> Coupon:
    """
    Retourne le coupon utilisable pour cet utilisateur ou lève InvalidCoupon.
    - Introuvable / inactif: 404 "Coupon not found".
    - Expiré mais encore marqué actif: désactivé sur place puis 404 "Coupon expired".
    """
    code = (code or "").strip()
    if not code or not user_id:
        raise InvalidCoupon("Coupon not found")
    row = repository.find_active_coupon(code, user_id)
    if not row:
        raise InvalidCoupon("Coupon not found")
    coupon = Coupon.from_row(row)
    if coupon.is_expired(now):
        repository.deactivate_coupon(coupon.code, user_id)
        logger.info("coupons.expired code=%s user_id=%s", coupon.code, user_id)
        raise InvalidCoupon("Coupon expired")
    return coupon

def validate(code: str, user_id: str, now: Optional[datetime] = None) -> Optional[Coupon]:
    """Variante sans exception: None signifie 'pas de coupon utilisable'."""
    try:
        return require_valid(code, user_id, now=now)
    except InvalidCoupon:
        return None

def find_usable(code: str, user_id: str, now: Optional[datetime] = None) -> Optional[Coupon]:
    """Lecture seule: coupon actif et non expiré, sinon None. Aucune désactivation."""
    code = (code or "").strip()
    if not code or not user_id:
        return None
    row = repository.find_active_coupon(code, user_id)
    if not row:
        return None
    coupon = Coupon.from_row(row)
    return coupon if coupon.is_valid(now) else None

def get_active_coupon(user_id: str, now: Optional[datetime] = None) -> Optional[Coupon]:
    row = repository.find_active_coupon_for_user(user_id)
    if not row:
        return None
    coupon = Coupon.from_row(row)
    return coupon if coupon.is_valid(now) else None

def apply_coupon_to(checkout_total: int, coupon: Optional[Coupon]) -> int:
    """Total remisé (centimes). InvalidCoupon(400) si coupon absent ou pourcentage hors [0, 100]."""
    if coupon is None:
        raise InvalidCoupon("Coupon manquant", status_code=400)
    if not 0 <= coupon.discount_percentage <= 100:
        raise InvalidCoupon(f"Pourcentage invalide: {coupon.discount_percentage}", status_code=400)
    return checkout_total - percentage_of(checkout_total, coupon.discount_percentage)

def auto_issue(user_id: str, now: Optional[datetime] = None) -> Coupon:
    """
    Émet le coupon cadeau de l'utilisateur.
    - Écrase l'éventuel coupon précédent (actif ou non): un seul coupon par utilisateur.
    - Sans coupon précédent, simple création.
    """
    issued_at = now or datetime.now(timezone.utc)
    coupon = Coupon(
        code=generate_code(),
        discount_percentage=config.COUPON_GIFT_PERCENTAGE,
        expiration_date=issued_at + timedelta(days=config.COUPON_GIFT_VALIDITY_DAYS),
        user_id=user_id,
        is_active=True,
    )
    row = repository.replace_user_coupon(coupon.to_row())
    logger.info("coupons.auto_issue user_id=%s code=%s", user_id, coupon.code)
    return Coupon.from_row(row)

def deactivate(code: str, user_id: str) -> bool:
    """Désactive le coupon; True si une ligne a changé, False si déjà inactif (no-op)."""
    changed = repository.deactivate_coupon(code, user_id) > 0
    if changed:
        logger.info("coupons.deactivated code=%s user_id=%s", code, user_id)
    return changed
