"""User-facing front-ends that consume the task subsystem."""
