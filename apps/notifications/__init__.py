"""Notifications app package.

In-app notifications for travellers and hotel owners, created after commit
from booking and inventory domain events, plus the email helper used by
the invoice task.
"""
