"""Feature 'coupons': un coupon actif au plus par utilisateur (validation, cadeau, désactivation)."""
