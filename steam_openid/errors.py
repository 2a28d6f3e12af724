from __future__ import annotations

import enum
from typing import Dict, Optional, Type


class ErrorKind(enum.Enum):
    INVALID_RETURN_PATH = "InvalidReturnPath"
    RETURN_PATH_MISMATCH = "ReturnPathMismatch"
    INVALID_CHARACTERS = "InvalidCharacters"
    DUPLICATE_REQUIRED_FIELD = "DuplicateRequiredField"
    UNEXPECTED_FIELD = "UnexpectedField"
    INVALID_SIGNED_CHARACTERS = "InvalidSignedCharacters"
    UNEXPECTED_SIGNED_FIELD = "UnexpectedSignedField"
    INVALID_NAMESPACE = "InvalidNamespace"
    INVALID_MODE = "InvalidMode"
    INVALID_ENDPOINT = "InvalidEndpoint"
    CLAIMED_ID_IDENTITY_MISMATCH = "ClaimedIdIdentityMismatch"
    RETURN_TO_MISMATCH = "ReturnToMismatch"
    INVALID_ASSOC_HANDLE = "InvalidAssocHandle"
    INVALID_NONCE_FORMAT = "InvalidNonceFormat"
    NONCE_PARSE_FAILURE = "NonceParseFailure"
    NONCE_OUT_OF_SKEW = "NonceOutOfSkew"
    INVALID_CLAIMED_ID_FORMAT = "InvalidClaimedIdFormat"
    NETWORK_ERROR = "NetworkError"
    REMOTE_VERIFICATION_FAILED = "RemoteVerificationFailed"


class SteamOpenIdError(Exception):
    """Base class for every rejected login attempt.

    Subclasses pin ``kind``; callers can either catch a concrete class or
    catch this one and branch on ``err.kind``.
    """

    kind: ErrorKind

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}"


class InvalidReturnPath(SteamOpenIdError):
    kind = ErrorKind.INVALID_RETURN_PATH


class ReturnPathMismatch(SteamOpenIdError):
    kind = ErrorKind.RETURN_PATH_MISMATCH


class InvalidCharacters(SteamOpenIdError):
    kind = ErrorKind.INVALID_CHARACTERS


class DuplicateRequiredField(SteamOpenIdError):
    kind = ErrorKind.DUPLICATE_REQUIRED_FIELD


class UnexpectedField(SteamOpenIdError):
    kind = ErrorKind.UNEXPECTED_FIELD


class InvalidSignedCharacters(SteamOpenIdError):
    kind = ErrorKind.INVALID_SIGNED_CHARACTERS


class UnexpectedSignedField(SteamOpenIdError):
    kind = ErrorKind.UNEXPECTED_SIGNED_FIELD


class InvalidNamespace(SteamOpenIdError):
    kind = ErrorKind.INVALID_NAMESPACE


class InvalidMode(SteamOpenIdError):
    kind = ErrorKind.INVALID_MODE


class InvalidEndpoint(SteamOpenIdError):
    kind = ErrorKind.INVALID_ENDPOINT


class ClaimedIdIdentityMismatch(SteamOpenIdError):
    kind = ErrorKind.CLAIMED_ID_IDENTITY_MISMATCH


class ReturnToMismatch(SteamOpenIdError):
    kind = ErrorKind.RETURN_TO_MISMATCH


class InvalidAssocHandle(SteamOpenIdError):
    kind = ErrorKind.INVALID_ASSOC_HANDLE


class InvalidNonceFormat(SteamOpenIdError):
    kind = ErrorKind.INVALID_NONCE_FORMAT


class NonceParseFailure(SteamOpenIdError):
    kind = ErrorKind.NONCE_PARSE_FAILURE


class NonceOutOfSkew(SteamOpenIdError):
    kind = ErrorKind.NONCE_OUT_OF_SKEW


class InvalidClaimedIdFormat(SteamOpenIdError):
    kind = ErrorKind.INVALID_CLAIMED_ID_FORMAT


class NetworkError(SteamOpenIdError):
    kind = ErrorKind.NETWORK_ERROR

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        # None when the request never got an HTTP response
        self.status_code = status_code

    def __reduce__(self):
        return (self.__class__, (self.message, self.status_code))


class RemoteVerificationFailed(SteamOpenIdError):
    kind = ErrorKind.REMOTE_VERIFICATION_FAILED


ERRORS_BY_KIND: Dict[ErrorKind, Type[SteamOpenIdError]] = {
    cls.kind: cls for cls in SteamOpenIdError.__subclasses__()
}
