"""Per-session accusation statistics."""
