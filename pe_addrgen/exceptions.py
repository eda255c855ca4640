"""Custom exceptions for pe-addrgen."""
from __future__ import annotations


class PEAddrGenError(Exception):
    """Base exception for all pe-addrgen errors."""
    pass


class PatternError(PEAddrGenError):
    """Malformed byte pattern text."""
    def __init__(self, pattern: str, token: str | None = None):
        self.pattern = pattern
        self.token = token
        if token is None:
            msg = f"Empty pattern: {pattern!r}"
        else:
            msg = f"Invalid token {token!r} in pattern {pattern!r}"
        super().__init__(msg)


class SignatureDefinitionError(PEAddrGenError):
    """Invalid signature definition."""
    pass


class ImageOpenError(PEAddrGenError):
    """Failed to open or parse a candidate image."""
    pass


class VersionInfoNotFoundError(ImageOpenError):
    """No usable embedded version in the image."""
    pass


class ResolutionError(PEAddrGenError):
    """Address resolution read past the end of a section."""
    pass


class SignatureNotFoundError(PEAddrGenError):
    """Signature did not match anywhere in an image (strict mode)."""
    def __init__(self, signature: str, image_path: str | None = None):
        self.signature = signature
        self.image_path = image_path
        msg = f"Signature '{signature}' not found"
        if image_path:
            msg += f" in {image_path}"
        super().__init__(msg)


class InvalidFormatError(PEAddrGenError):
    """Unknown output format."""
    pass
