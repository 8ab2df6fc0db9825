"""Delivery range calculator: which restaurants can deliver to a point right now."""
