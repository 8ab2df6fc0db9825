"""
Key-value store contract consumed by the index writers and readers.

- get/set with expiry, distinguishing "not found" from other failures.
- Optional native geospatial add/search.
"""
