"""Chat bot building blocks: text parsing, message history, Redis state and statistics."""

__version__ = "0.1.0"