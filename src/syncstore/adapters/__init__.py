"""Adapters binding syncstore ports to concrete backends."""
