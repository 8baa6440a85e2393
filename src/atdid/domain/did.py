"""The ATProto subset of Decentralised Identifiers.

Grammar accepted here: ``did:(web|plc):<identifier>`` where the identifier
is drawn from ``[A-Za-z0-9._:-]`` and does not end in ``:``.

See https://www.w3.org/TR/did-core and https://atproto.com/specs/did.

INVARIANT: A :class:`Did` is only ever built by :meth:`Did.try_create`.
Once built it is never re-validated.
"""

from __future__ import annotations

import re
from enum import StrEnum
from typing import TYPE_CHECKING, Any, ClassVar

if TYPE_CHECKING:
    from pydantic import GetCoreSchemaHandler
    from pydantic_core import CoreSchema

DID_PREFIX = "did:"
MIN_LENGTH = 9

# Positions are code-point offsets, not byte offsets.
_PREFIX = slice(0, 4)
_METHOD_TOKEN = slice(4, 8)
_METHOD_NAME = slice(4, 7)
_BODY_START = 8

_IDENTIFIER_RE = re.compile(r"[A-Za-z0-9._:\-]+")

_CONSTRUCT_KEY = object()


class DidMethod(StrEnum):
    """The two DID methods supported by ATProto."""

    WEB = "web"
    PLC = "plc"

    @property
    def token(self) -> str:
        """The method as it appears in a DID, trailing colon included."""
        return f"{self.value}:"


_METHOD_TOKENS = frozenset(m.token for m in DidMethod)


# ── Errors ───────────────────────────────────────────────────────────


class DidValidationError(ValueError):
    """Base class for the ways a candidate string can fail DID validation."""

    code: ClassVar[str] = "INVALID_DID"
    template: ClassVar[str] = "Invalid DID"

    def __init__(self, found: str | None = None) -> None:
        self.found = found
        super().__init__(self.template.format(found=found))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DidValidationError):
            return NotImplemented
        return type(self) is type(other) and self.found == other.found

    def __hash__(self) -> int:
        return hash((type(self), self.found))

    def __repr__(self) -> str:
        if self.found is None:
            return f"{type(self).__name__}()"
        return f"{type(self).__name__}(found={self.found!r})"


class TooShort(DidValidationError):
    code = "TOO_SHORT"
    template = "Expected an identifier of at least 9 chars"

    def __init__(self) -> None:
        super().__init__(None)


class InvalidPrefix(DidValidationError):
    code = "INVALID_PREFIX"
    template = "Expected a prefix of did: - found {found}"

    def __init__(self, found: str) -> None:
        super().__init__(found)


class InvalidMethod(DidValidationError):
    code = "INVALID_METHOD"
    template = "Expected a method of either web or plc - found {found}"

    def __init__(self, found: str) -> None:
        super().__init__(found)


class InvalidIdentifier(DidValidationError):
    code = "INVALID_IDENTIFIER"
    template = "Identifier didn't conform to DID identifier format - found {found}"

    def __init__(self, found: str) -> None:
        super().__init__(found)


# ── Did ──────────────────────────────────────────────────────────────


class Did:
    """A DID string known to satisfy the ATProto grammar subset.

    Instances are immutable and compare and hash by their wrapped string.
    Obtain one with :meth:`try_create`; calling ``Did(...)`` directly is
    a ``TypeError``.
    """

    __slots__ = ("_inner",)

    _inner: str

    def __new__(cls, *args: Any, **kwargs: Any) -> Did:
        raise TypeError("Did cannot be constructed directly; use Did.try_create()")

    @classmethod
    def _wrap(cls, value: str) -> Did:
        instance = object.__new__(cls)
        object.__setattr__(instance, "_inner", value)
        return instance

    @classmethod
    def try_create(cls, candidate: str) -> Did:
        """Validate *candidate* and wrap it.

        Checks run in a fixed order and the first failure wins:
        length, prefix, method, identifier body.

        Raises:
            TooShort: *candidate* has 8 or fewer characters.
            InvalidPrefix: the first four characters are not ``did:``.
            InvalidMethod: the next four are neither ``web:`` nor ``plc:``.
            InvalidIdentifier: the remainder has a disallowed character
                or the string ends with ``:``.
        """
        if len(candidate) < MIN_LENGTH:
            raise TooShort()

        prefix = candidate[_PREFIX]
        if prefix != DID_PREFIX:
            raise InvalidPrefix(prefix)

        token = candidate[_METHOD_TOKEN]
        if token not in _METHOD_TOKENS:
            raise InvalidMethod(token)

        body = candidate[_BODY_START:]
        if _IDENTIFIER_RE.fullmatch(body) is None or candidate.endswith(":"):
            raise InvalidIdentifier(body)

        return cls._wrap(candidate)

    @property
    def method(self) -> DidMethod:
        """The DID method, read from the wrapped string on every access."""
        name = self._inner[_METHOD_NAME]
        if name == "web":
            return DidMethod.WEB
        if name == "plc":
            return DidMethod.PLC
        raise AssertionError(f"An unsupported DID method slipped past validation: {self!r}")

    @property
    def identifier(self) -> str:
        """The method-specific identifier (everything after ``did:<method>:``)."""
        return self._inner[_BODY_START:]

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __str__(self) -> str:
        return self._inner

    def __repr__(self) -> str:
        return f"Did({self._inner!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Did):
            return NotImplemented
        return self._inner == other._inner

    def __hash__(self) -> int:
        return hash(self._inner)

    def __copy__(self) -> Did:
        return self

    def __deepcopy__(self, memo: dict[int, Any]) -> Did:
        return self

    def __reduce__(self) -> tuple[Any, tuple[str]]:
        return (Did.try_create, (self._inner,))

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> CoreSchema:
        """Validate strings through :meth:`try_create`; serialize as plain strings."""
        from pydantic_core import core_schema

        from_str = core_schema.chain_schema(
            [
                core_schema.str_schema(),
                core_schema.no_info_plain_validator_function(cls.try_create),
            ]
        )
        return core_schema.json_or_python_schema(
            json_schema=from_str,
            python_schema=core_schema.union_schema(
                [core_schema.is_instance_schema(cls), from_str]
            ),
            serialization=core_schema.plain_serializer_function_ser_schema(str),
        )


def is_valid_did(candidate: str) -> bool:
    """Return True if *candidate* would be accepted by :meth:`Did.try_create`."""
    try:
        Did.try_create(candidate)
    except DidValidationError:
        return False
    return True
