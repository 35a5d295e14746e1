"""Use cases and execution helpers built on top of the registry client."""
