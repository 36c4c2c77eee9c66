"""Request payload validators."""
