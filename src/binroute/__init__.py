"""Capacity-limited bin registry and single-truck route planning service."""
