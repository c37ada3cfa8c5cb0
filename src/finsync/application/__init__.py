"""Application layer: commands, queries, DTOs and services."""
