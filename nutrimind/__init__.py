"""NutriMind API client with single-flight token refresh."""

__version__ = "0.1.0"
