from typing import Optional


class DeflateError(ValueError):
    """Base class for every malformed-stream condition met while decoding.

    ``partial_block`` is filled in by the block dispatcher with the block that
    was being decoded when the error happened, so callers can still show what
    was decoded before the failure.
    """

    def __init__(self, message: str, *, partial_block: Optional[object] = None):
        super().__init__(message)
        self.partial_block = partial_block


class UnexpectedEndOfData(DeflateError, EOFError):
    pass


class InvalidBlockType(DeflateError):
    pass


class InvalidStoredBlock(DeflateError):
    pass


class InvalidCodeLengths(DeflateError):
    pass


class IncompleteCodeLengths(DeflateError):
    pass


class InvalidHuffmanCode(DeflateError):
    pass


class InvalidBackReference(DeflateError):
    pass
