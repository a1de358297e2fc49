class OfflineStorageError(Exception):
    """Base class for offline storage failures"""


class StorageUnavailable(OfflineStorageError):
    """
    The local store cannot be opened or reached
    Callers should fall back to online-only behaviour
    """


class NotFound(OfflineStorageError):
    """A referenced record does not exist"""


class PendingMutationNotFound(NotFound):
    def __init__(self, item_id):
        self.item_id = item_id
        super().__init__(f"Pending mutation {item_id} not found")


class SerializationFailure(OfflineStorageError):
    """A value cannot be stored as JSON; never retried"""


class PartitionNotFound(OfflineStorageError):
    def __init__(self, partition):
        self.partition = partition
        super().__init__(f"Offline partition '{partition}' does not exist")
