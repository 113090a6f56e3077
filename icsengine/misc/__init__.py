"""Helpers, currently only regex snipplets."""
