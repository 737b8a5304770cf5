"""Schema check endpoint."""
