"""docqa — upload a document, then ask questions answered from its passages."""

__version__ = "0.1.0"
