"""Structured output extraction for generated quiz JSON."""
