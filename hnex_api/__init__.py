"""Models, token authentication and request handlers for a Flask JSON account API."""

__version__ = "0.1.0"