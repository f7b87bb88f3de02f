"""Input parsing for Marrow."""
