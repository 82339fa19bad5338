class StoreError(Exception):
    """A statement against the relational store failed."""


class RecordNotFoundError(StoreError):
    def __init__(self, table: str, key: str):
        super().__init__(f"No row in {table} with id {key!r}")
        self.table = table
        self.key = key


class ApiRequestError(Exception):
    """Non-2xx response returned by the REST API."""

    def __init__(self, status_code: int, message: str):
        super().__init__(f"HTTP error! status: {status_code}: {message}")
        self.status_code = status_code
        self.message = message
