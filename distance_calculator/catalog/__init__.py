"""
Catalog package for the delivery range calculator.

Responsibilities:
- Download the restaurant CSV snapshot from the configured feed URL.
- Normalize rows into the canonical Restaurant schema, skipping malformed rows.
"""
