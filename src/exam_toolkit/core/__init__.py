"""Core data models and schema validation."""
