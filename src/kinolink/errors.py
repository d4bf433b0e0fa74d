"""Exception types raised inside kinolink."""


class KinolinkError(Exception):
    """Base class for kinolink errors."""


class MalformedPayloadError(KinolinkError):
    """A metadata service answered with a payload that cannot be interpreted."""

    def __init__(self, service: str, detail: str) -> None:
        super().__init__(f"{service}: {detail}")
        self.service = service
        self.detail = detail


class StoreError(KinolinkError):
    """The persistent store rejected a read or write."""
