"""Port interfaces implemented by adapters."""
