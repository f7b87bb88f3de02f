"""Markdown rendering with source line annotations."""
