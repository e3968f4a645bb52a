"""Derived progress metrics; nothing here is stored."""
