"""atdid — validation of the ATProto subset of Decentralised Identifiers."""

from atdid.domain.did import (
    Did,
    DidMethod,
    DidValidationError,
    InvalidIdentifier,
    InvalidMethod,
    InvalidPrefix,
    TooShort,
    is_valid_did,
)

__version__ = "0.1.0"

__all__ = [
    "Did",
    "DidMethod",
    "DidValidationError",
    "InvalidIdentifier",
    "InvalidMethod",
    "InvalidPrefix",
    "TooShort",
    "__version__",
    "is_valid_did",
]
