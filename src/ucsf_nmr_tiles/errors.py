"""
Exceptions raised while decoding UCSF files.

Every decode failure is terminal for the parse attempt. ``stage`` names the
part of the file that failed: ``"header"``, ``"axis_header"`` or ``"data"``.
"""


class UcsfError(Exception):
    """Base exception for UCSF decoding."""

    def __init__(self, message: str, stage: str = "header"):
        super().__init__(message)
        self.stage = stage


class ParseFailure(UcsfError):
    """Malformed or truncated input (bad magic, short record, short sample stream)."""

    pass


class UnsupportedComponents(UcsfError):
    """Component count is not 1; only real-valued data is supported."""

    pass


class UnsupportedFormatVersion(UcsfError):
    """Format version is not the single supported version."""

    pass
