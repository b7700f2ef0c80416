"""
Feature 'checkout': construction de la session de paiement Stripe et réconciliation.
- cart: logique panier pure (agrégation, prix catalogue, line_items Stripe)
- metadata: (dé)sérialisation du snapshot attaché à la session
- stripe_client: adaptateur Stripe
- service: aperçu et création de session
- reconciliation: confirmation de paiement et matérialisation de la commande
"""
