"""A small threaded HTTP server library for static files and search-result pages."""

__version__ = "0.1.0"