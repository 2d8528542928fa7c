"""Clients for Firebase, Stripe and the email provider."""
