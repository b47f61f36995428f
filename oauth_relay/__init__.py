"""OAuth 2.0 authorization code relay for plugins without a client secret."""

__version__ = "0.1.0"
