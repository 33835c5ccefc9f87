"""Domain layer - value model, entities and engine services."""
