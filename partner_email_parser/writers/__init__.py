"""Output writers for parsing results."""
