"""Concrete call provider adapters."""
