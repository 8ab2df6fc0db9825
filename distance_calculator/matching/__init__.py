"""
Matching engine.

Narrows the catalog to restaurants that can deliver to a point right now:
spatial bounding box, then opening hours, then exact great-circle distance.
"""
