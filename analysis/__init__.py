"""Option pricing."""
