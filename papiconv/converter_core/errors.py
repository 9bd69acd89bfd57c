"""
Exceptions raised by the conversion engine.

All of them are fatal: the conversion stops at the first one. Recoverable
problems (unknown settings, bad dates, stray round keys) are logged as
warnings instead and never raise.
"""


class ConversionError(ValueError):
    """Base class for errors that abort a conversion."""


class MissingTableError(ConversionError):
    """A table required by the conversion is absent from the store."""

    def __init__(self, table_name: str):
        super().__init__(f"Required table '{table_name}' not found in storage")
        self.table_name = table_name


class ReferenceIntegrityError(ConversionError):
    """A round points at a player reference that does not exist."""

    def __init__(self, reference: int, player_ref=None):
        message = f"Opponent reference {reference} not found in mapping"
        if player_ref is not None:
            message += f" (player {player_ref})"
        super().__init__(message)
        self.reference = reference
        self.player_ref = player_ref


class DocumentError(ConversionError):
    """The document does not have the expected shape."""


class NotAStoreError(ConversionError):
    """The file exists but cannot be read as a tournament store."""

    def __init__(self, path: str):
        super().__init__(f"Not a tournament store: {path}")
        self.path = path
