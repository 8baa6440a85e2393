"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, atdid.toml only contains overrides.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from atdid.domain.did import DidMethod


class CheckConfig(BaseModel):
    """[check] section."""

    model_config = {"frozen": True}

    methods: list[DidMethod] = Field(default_factory=lambda: list(DidMethod))
    fail_fast: bool = False
    ignore_comments: bool = True

    @field_validator("methods")
    @classmethod
    def _methods_not_empty(cls, value: list[DidMethod]) -> list[DidMethod]:
        if not value:
            raise ValueError("at least one DID method must be accepted")
        # De-duplicate, keeping the declared order.
        return list(dict.fromkeys(value))


class OutputConfig(BaseModel):
    """[output] section."""

    model_config = {"frozen": True}

    color: bool = True
    width: int | None = Field(default=None, gt=0)
