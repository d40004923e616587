"""PageSnap - render web pages to PDF."""

__version__ = "0.1.0"
