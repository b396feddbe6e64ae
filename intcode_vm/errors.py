"""
Intcode VM — Exception Hierarchy

Every error the package raises derives from IntcodeError. All of them are
fatal for the machine that raised them: the interpreter never retries or
guesses a recovery. Running out of input is NOT an error (see
ExecuteResult.INPUT_NEEDED).
"""

from typing import Optional

__all__ = [
    'IntcodeError', 'ParseError', 'InvalidOpcode',
    'InvalidDestination', 'AddressError', 'WordOverflow',
]


class IntcodeError(Exception):
    """Base class for Intcode errors."""
    def __init__(self, message: str, address: Optional[int] = None):
        self.message = message
        self.address = address
        super().__init__(message)

    def __str__(self) -> str:
        if self.address is not None:
            return f"@{self.address}: {self.message}"
        return self.message


class ParseError(IntcodeError):
    """Raised when program text holds a token that is not a signed integer."""
    def __init__(self, message: str, token: str = "", index: int = 0):
        self.token = token
        self.index = index
        super().__init__(message)


class InvalidOpcode(IntcodeError):
    """Unknown opcode, negative instruction word, or bad mode digit."""


class InvalidDestination(IntcodeError):
    """Immediate mode used for a write-target parameter."""


class AddressError(IntcodeError):
    """A computed memory address is negative."""


class WordOverflow(IntcodeError):
    """A value stored to memory does not fit a signed 64-bit word."""
