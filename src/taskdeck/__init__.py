"""taskdeck: a small task list with validated mutations, derived views and two-tier persistence."""

__version__ = "0.1.0"
