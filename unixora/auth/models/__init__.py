"""Auth models."""
