"""Job verification workflow: arrival, handover, completion, payment and reputation."""

__version__ = "0.1.0"
