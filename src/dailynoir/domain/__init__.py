"""Content models, enums and typed errors."""
