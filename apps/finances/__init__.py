"""Finances app package.

Checkout settlement: card validation (format, Luhn and expiry checks only,
no real payment gateway), the one-per-booking Payment record and invoice
rendering.
"""
