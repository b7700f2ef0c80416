"""Backend boutique: checkout Stripe, coupons utilisateur et réconciliation des commandes."""
