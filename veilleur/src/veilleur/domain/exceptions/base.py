"""
Base exception for Veilleur domain errors.
"""


class VeilleurError(Exception):
    """
    Root of every error raised by Veilleur itself.

    Attributes:
        message: Human-readable description
        code: Stable machine-readable error code
    """

    code = "VEILLEUR_ERROR"

    def __init__(self, message: str, code: str = None):
        self.message = message
        if code is not None:
            self.code = code
        super().__init__(message)
