"""FastAPI service for quiz generation."""
