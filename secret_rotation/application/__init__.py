"""Application layer - Use cases orchestrating the domain."""
