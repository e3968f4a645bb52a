"""Mentor roster, review queue and apprentice assignment."""
