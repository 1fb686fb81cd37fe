"""Feed assembly and engagement aggregation service for server-beta."""

__version__ = "0.1.0"
