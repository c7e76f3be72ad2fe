"""Application layer: use cases, services, DTOs and ports."""
