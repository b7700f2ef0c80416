"""Feature 'orders': registre des commandes, une commande par session de paiement."""
