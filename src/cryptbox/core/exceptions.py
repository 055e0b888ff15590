"""
Exceptions for the cryptbox package
Every failure a library caller can see derives from CryptboxError
"""


class CryptboxError(Exception):
    # general container for errors
    pass


class InvalidParameterError(CryptboxError, ValueError):
    # raised for an unsupported size, encoding, algorithm or group
    pass


class InvalidGroupParametersError(InvalidParameterError):
    # raised when a prime/generator pair is malformed (not a primality test)
    pass


class MissingParameterError(CryptboxError, ValueError):
    # raised when a required value is absent (password, restore fields)
    pass


class IntegrityFailureError(CryptboxError):
    # raised when a container cannot be decrypted; never says why
    pass


class IOFailureError(CryptboxError):
    # raised when a path cannot be read or written

    def __init__(self, path, message=None):
        self.path = str(path)
        super().__init__(message or f"cannot access {self.path}")


class ComputationFailureError(CryptboxError):
    # raised when key derivation or modular exponentiation fails internally
    pass


# Short names matching the error taxonomy
InvalidParameter = InvalidParameterError
InvalidGroupParameters = InvalidGroupParametersError
MissingParameter = MissingParameterError
IntegrityFailure = IntegrityFailureError
IOFailure = IOFailureError
ComputationFailure = ComputationFailureError
