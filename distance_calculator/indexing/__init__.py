"""
Index package.

Responsibilities:
- Turn normalized restaurants into sorted per-axis coordinate indexes and an
  eligibility (schedule) map.
- Split those indexes into bounded chunks for the store and reassemble them.
"""
