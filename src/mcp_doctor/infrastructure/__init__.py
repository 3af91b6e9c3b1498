"""Cross-cutting concerns: logging and error types."""
