"""Domain error taxonomy.

Every failure that reaches a caller is one of these. The HTTP layer maps
them to status codes in ``workshop.main``; the ``reason``/``detail`` carried
here is for logs only and is never echoed back for ``Denied``/``NotFound``.
"""


class WorkshopError(Exception):
    status_code = 400
    public_message = "Request failed"


class Denied(WorkshopError):
    status_code = 403
    public_message = "Not permitted"

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class NotFound(WorkshopError):
    status_code = 404
    public_message = "Not found"

    def __init__(self, kind: str, detail: str | None = None):
        super().__init__(detail or f"{kind} not found")
        self.kind = kind
        self.detail = detail

    @property
    def message(self) -> str:
        # only the kind is exposed, never which lookup failed
        return f"{self.kind} not found"


class ValidationFailed(WorkshopError):
    status_code = 422
    public_message = "Invalid input"

    def __init__(self, field: str, message: str):
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message


class StoreError(WorkshopError):
    status_code = 503
    public_message = "Please try again"


class LinkCreationFailed(StoreError):
    public_message = "Could not create public link, please try again"


class ProvisioningFailed(WorkshopError):
    status_code = 400
    public_message = "Could not create user"
