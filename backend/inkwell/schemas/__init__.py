"""Pydantic request/response models (the JSON contract of the API)."""
