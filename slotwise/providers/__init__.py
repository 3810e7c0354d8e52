"""External collaborators: calendar and messaging providers."""
