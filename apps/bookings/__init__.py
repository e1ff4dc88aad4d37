"""Bookings app package.

A booking groups flight segments bought from the flight supplier and hotel
stays held against room inventory. While PENDING it acts as the traveller's
cart; checkout confirms it and cancellation releases everything it holds.
"""
