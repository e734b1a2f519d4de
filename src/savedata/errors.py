class SaveDataError(Exception):
    """Base exception for save data errors."""


class SaveValidationError(SaveDataError):
    """Raised when a record or argument fails validation."""


class SaveSerializationError(SaveDataError):
    """Raised when save bytes cannot be decoded into a SaveData."""


class SaveStorageError(SaveDataError):
    """Raised when the storage backend fails to read or write a slot."""


class SlotNotFoundError(SaveStorageError):
    """Raised when reading a slot that has never been written."""


class InvalidSlotError(SaveValidationError):
    """Raised when a slot identifier is not usable as a storage key."""


class MutationError(SaveDataError):
    """Raised when a queued mutation fails while the queue is draining."""

    def __init__(self, mutation: object, cause: BaseException) -> None:
        super().__init__(f"Mutation {mutation!r} failed: {cause}")
        self.mutation = mutation
        self.cause = cause
