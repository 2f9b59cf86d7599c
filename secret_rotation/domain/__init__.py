"""Domain layer - Entities, value objects and services of secret rotation."""
