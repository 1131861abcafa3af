"""Store drivers for persistence contexts."""
