"""devicegate — device fingerprint access gate."""

__version__ = "0.3.0"
