# FILE: factory/ir/errors.py
class CompilerError(Exception):
    """Base class for IR compiler errors."""


class EmptyBriefError(CompilerError):
    """Raised when the trimmed brief is empty. The only hard compile failure."""

    def __init__(self, message: str = "brief cannot be empty"):
        super().__init__(message)
