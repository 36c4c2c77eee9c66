"""Pydantic models and enums for the family configuration domain."""
