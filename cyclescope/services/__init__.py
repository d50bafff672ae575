"""Service layer: assistant orchestration, batch coordination, composition."""
