"""schemacheck - usage-aware validation of API schema changes."""

__version__ = "0.1.0"

# Re-export main components for easy access
# Note: CLI and API components imported on-demand to avoid import cost

__all__ = [
    "__version__",
]
