"""SIP/SWP projection engine and calculation-history service."""

__version__ = "0.1.0"
