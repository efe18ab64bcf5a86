"""Domain models and domain errors."""
