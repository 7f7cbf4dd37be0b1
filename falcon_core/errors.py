"""Exceptions raised by the Falcon engine."""


class FalconError(Exception):
    """Base class of all the errors of this package."""


class InvalidSeedLength(FalconError, ValueError):
    """The key generation seed does not have the expected length."""


class NotInvertible(FalconError, ArithmeticError):
    """A polynomial is not a unit modulo (x ** n + 1, q)."""


class KeyGenerationFailed(FalconError):
    """No acceptable NTRU basis was found within the retry budget."""


class SigningAborted(FalconError):
    """The source of randomness failed during signing."""


class SigningAttemptsExhausted(SigningAborted):
    """No short enough signature was found within the retry budget."""


class InvalidSignatureEncoding(FalconError, ValueError):
    """A signature bytestring is malformed."""


class InvalidKeyEncoding(FalconError, ValueError):
    """A public or secret key bytestring is malformed."""
