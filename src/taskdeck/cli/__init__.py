"""Composition root, slash commands and the entry point."""
