"""WhatsApp waste-manifest extraction bot."""

__version__ = "0.1.0"
