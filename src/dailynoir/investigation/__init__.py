"""Clue discovery, interrogation and accusation."""
