"""Eventing operator: Channel reconciliation and condition aggregation."""

__version__ = "0.1.0"
