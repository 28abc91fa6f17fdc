"""Parish records backend: sacrament records, certificate requests and parish operations."""

__version__ = "1.0.0"
