"""Brevo transactional email provider."""

from .email import BrevoEmailRepository

__all__ = ["BrevoEmailRepository"]
