"""Domain layer: entities and pure content services."""
