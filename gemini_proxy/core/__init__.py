"""Core layer: configuration, exceptions, logging and cancellation."""
