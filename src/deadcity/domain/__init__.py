"""Domain layer: definitions, runtime entities and session state."""
