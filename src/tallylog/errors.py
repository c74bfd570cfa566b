"""Error types for tallylog."""


class OptionDefinitionError(Exception):
    """Raised when the option table is misconfigured (developer error)."""
