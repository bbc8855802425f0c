"""Restake validator package."""
