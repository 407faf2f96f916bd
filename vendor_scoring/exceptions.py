# exceptions.py
"""Exception types raised by vendor_scoring."""


class ConfigurationError(ValueError):
    """Invalid weights, metrics, scores or configuration keys."""


class TenderStateError(RuntimeError):
    """A tender status transition that is not allowed."""
