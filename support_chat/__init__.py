"""Customer-support chat backend."""
