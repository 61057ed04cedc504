"""Infrastructure layer - configuration, logging and backend clients."""
