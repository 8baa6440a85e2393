"""Domain layer — the DID value type and its validation rules.

This layer depends only on stdlib (pydantic is imported lazily for
schema generation). It must never import from services, commands,
output, or config.
"""
