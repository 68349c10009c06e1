"""Error taxonomy for the lease allocator.

Every LeaseError is a recoverable, caller-facing condition. The request
handler maps ``code`` and ``msg`` straight into the JSON error body.
"""


class LeaseError(Exception):
    code: int = 0
    msg: str = "Internal error!"

    def __init__(self, detail: str | None = None):
        super().__init__(detail or self.msg)

    def to_dict(self) -> dict:
        return {"error": {"code": self.code, "msg": self.msg}}


class PoolExhausted(LeaseError):
    """Every id in range is leased and unexpired."""
    code = 1
    msg = "No id available!"


class NotLeased(LeaseError):
    """Renewal of an id that is free or already expired."""
    code = 2
    msg = "Id not leased!"

    def __init__(self, lease_id: int):
        self.lease_id = lease_id
        super().__init__(f"Id {lease_id} is not leased")


class OutOfRange(LeaseError):
    code = 3
    msg = "Id out of range!"

    def __init__(self, lease_id: int, min_id: int, max_id: int):
        self.lease_id = lease_id
        super().__init__(f"Id {lease_id} outside [{min_id}, {max_id}]")


class ConfigError(ValueError):
    """Invalid startup configuration. Fatal."""
