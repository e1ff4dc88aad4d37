"""Hotels app package.

Hotel catalogue and room inventory: cities, hotels owned by hotel owners,
room types with a pool of interchangeable units, per-night availability
and owner-driven capacity reconciliation.
"""
