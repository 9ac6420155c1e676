"""Domain layer: entities, value objects, errors and repository contracts."""
