class StoreError(Exception):
    """Any failure talking to the record or blob store."""


class RecordNotFound(StoreError):
    def __init__(self, table: str, record_id):
        super().__init__(f"{table} record {record_id} not found")
        self.table = table
        self.record_id = record_id


class StorageUploadError(StoreError):
    def __init__(self, path: str):
        super().__init__(f"Upload failed for {path}")
        self.path = path
