"""Static configuration defaults."""
