"""Stage files locally, upload them in batches, browse a durable catalog."""

__version__ = "0.1.0"
