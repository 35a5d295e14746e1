"""Core of the registry client: domain models, configuration, endpoints, services."""
