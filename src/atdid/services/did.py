"""DidService — validate candidate strings and report per-candidate outcomes.

Wraps :meth:`Did.try_create` (which raises) in ServiceResult values, and
applies the configured accepted-methods policy on top of the grammar.

INVARIANT: Only DidValidationError is converted into a ServiceError.
Anything else propagates.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from pydantic import BaseModel

from atdid.domain.did import Did, DidMethod, DidValidationError
from atdid.services.base import BaseService
from atdid.services.result import ServiceResult
from atdid.services.telemetry import record_outcome, trace_span, traced

logger = logging.getLogger(__name__)

METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"
INVALID_DIDS = "INVALID_DIDS"
NO_INPUT = "NO_INPUT"


class DidDescription(BaseModel):
    """Success payload for one accepted DID."""

    model_config = {"frozen": True}

    did: Did
    method: DidMethod
    identifier: str

    @classmethod
    def of(cls, did: Did) -> DidDescription:
        return cls(did=did, method=did.method, identifier=did.identifier)


class _Rejected(Exception):
    """Internal carrier for a rejected candidate."""

    def __init__(self, code: str, message: str, found: str | None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.found = found


def _method_not_allowed(method: DidMethod, allowed: list[DidMethod]) -> _Rejected:
    names = ", ".join(m.value for m in allowed)
    return _Rejected(
        METHOD_NOT_ALLOWED,
        f"DID method {method.value} is not accepted here (allowed: {names})",
        method.value,
    )


def parse_candidates(lines: Iterable[str], *, ignore_comments: bool = True) -> list[str]:
    """Turn raw lines into candidates, one per line.

    Surrounding whitespace is stripped.  With *ignore_comments*, blank
    lines and lines starting with ``#`` are dropped.
    """
    candidates: list[str] = []
    for line in lines:
        text = line.strip()
        if ignore_comments and (not text or text.startswith("#")):
            continue
        candidates.append(text)
    return candidates


class DidService(BaseService):
    """Validation operations over DID candidates."""

    def _allowed_methods(self, methods: Iterable[DidMethod] | None) -> list[DidMethod]:
        if methods is None:
            return list(self._settings.check.methods)
        resolved = list(dict.fromkeys(DidMethod(m) for m in methods))
        return resolved or list(self._settings.check.methods)

    def _validate(self, candidate: str, allowed: list[DidMethod]) -> Did:
        try:
            did = Did.try_create(candidate)
        except DidValidationError as exc:
            logger.debug(
                "did.rejected",
                extra={"candidate": candidate, "code": exc.code, "found": exc.found},
            )
            record_outcome(exc.code)
            raise _Rejected(exc.code, str(exc), exc.found) from exc

        method = did.method
        if method not in allowed:
            logger.debug(
                "did.rejected",
                extra={"candidate": candidate, "code": METHOD_NOT_ALLOWED, "found": method.value},
            )
            record_outcome(METHOD_NOT_ALLOWED)
            raise _method_not_allowed(method, allowed)

        logger.debug("did.accepted", extra={"did": str(did), "method": method.value})
        record_outcome(None)
        return did

    @staticmethod
    def _describe(did: Did) -> dict[str, Any]:
        return DidDescription.of(did).model_dump(mode="json")

    @traced
    def inspect(
        self,
        candidate: str,
        *,
        methods: Iterable[DidMethod] | None = None,
    ) -> ServiceResult:
        """Validate a single candidate and describe it."""
        op = "inspect_did"
        allowed = self._allowed_methods(methods)
        try:
            did = self._validate(candidate, allowed)
        except _Rejected as rej:
            return ServiceResult.failure(
                op,
                rej.code,
                rej.message,
                detail={"candidate": candidate, "found": rej.found},
            )
        return ServiceResult.success(op, self._describe(did))

    @traced
    def check(
        self,
        candidates: Iterable[str],
        *,
        methods: Iterable[DidMethod] | None = None,
        fail_fast: bool | None = None,
    ) -> ServiceResult:
        """Validate many candidates; succeed only if every one is a valid DID."""
        op = "check_dids"
        pending = list(candidates)
        if not pending:
            return ServiceResult.failure(op, NO_INPUT, "No DID candidates were given")

        allowed = self._allowed_methods(methods)
        stop_early = self._settings.check.fail_fast if fail_fast is None else fail_fast

        items: list[dict[str, Any]] = []
        warnings: list[str] = []
        with trace_span("validate_candidates"):
            for index, candidate in enumerate(pending):
                try:
                    did = self._validate(candidate, allowed)
                except _Rejected as rej:
                    items.append(
                        {
                            "candidate": candidate,
                            "valid": False,
                            "method": None,
                            "identifier": None,
                            "code": rej.code,
                            "message": rej.message,
                            "found": rej.found,
                        }
                    )
                    if stop_early:
                        skipped = len(pending) - index - 1
                        if skipped:
                            warnings.append(
                                f"Stopped at first invalid DID; {skipped} candidate(s) not checked"
                            )
                        break
                    continue
                items.append(
                    {
                        "candidate": candidate,
                        "valid": True,
                        **self._describe(did),
                        "code": None,
                        "message": None,
                        "found": None,
                    }
                )

        valid_count = sum(1 for item in items if item["valid"])
        invalid_count = len(items) - valid_count
        summary: dict[str, Any] = {
            "items": items,
            "count": len(items),
            "valid_count": valid_count,
            "invalid_count": invalid_count,
        }

        if invalid_count:
            return ServiceResult.failure(
                op,
                INVALID_DIDS,
                f"{invalid_count} of {len(items)} candidate(s) are not valid DIDs",
                detail=summary,
                warnings=warnings,
            )
        return ServiceResult.success(op, summary, warnings=warnings)

    def read_candidates(self, path: Path) -> list[str]:
        """Read candidates from *path*, one per line."""
        with path.open(encoding="utf-8") as fh:
            return parse_candidates(fh, ignore_comments=self._settings.check.ignore_comments)
