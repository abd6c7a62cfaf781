"""Core layer - configuration, errors and the row cursor contract."""
