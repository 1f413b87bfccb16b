"""Validation utilities."""
from fastapi import HTTPException

MAX_ID_LENGTH = 128


def validate_id(name: str, value: str) -> str:
    """Validate identifier string coming from the request."""
    if not isinstance(value, str):
        raise HTTPException(status_code=400, detail=f"{name} is required")
    cleaned = value.strip()
    if not cleaned:
        raise HTTPException(status_code=400, detail=f"{name} is required")
    if len(cleaned) > MAX_ID_LENGTH or any(ch in cleaned for ch in "/\\"):
        raise HTTPException(status_code=400, detail=f"Invalid {name}")
    return cleaned
