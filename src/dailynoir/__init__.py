"""Daily and weekly murder-mystery case progression engine."""

__version__ = "0.1.0"
