"""Ports and session state shared by the front-end and the task subsystem."""
