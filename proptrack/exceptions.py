"""Domain errors raised by the service layer.

Lookups that fail with "not found" raise ``HTTPException(404)`` directly in the
services. The classes below describe rule violations and are mapped to HTTP
responses by the handlers registered in ``proptrack.main``.
"""


class ItemStatusError(Exception):
    """Base class for rejected item status changes."""


class InvalidStatus(ItemStatusError):
    def __init__(self, status: str):
        self.status = status
        super().__init__(f"'{status}' is not a valid item status")


class InvalidTransition(InvalidStatus):
    def __init__(self, current: str, new: str, allowed: list[str]):
        self.current = current
        self.allowed = allowed
        if allowed:
            hint = f"Allowed transitions from '{current}': {', '.join(allowed)}"
        else:
            hint = f"Status '{current}' is a terminal state."
        ItemStatusError.__init__(self, f"Cannot transition item from '{current}' to '{new}'. {hint}")
        self.status = new


class WorkflowError(Exception):
    """A workflow step is not allowed for the record in its current state."""


class ItemNotAvailable(WorkflowError):
    pass


class AssignmentError(WorkflowError):
    pass


class MaintenanceError(WorkflowError):
    pass


class DisposalError(WorkflowError):
    pass


class LocationError(WorkflowError):
    pass


class CategoryError(WorkflowError):
    pass


class ReturnError(WorkflowError):
    pass


class RequestError(WorkflowError):
    pass


class InvalidRequestTransition(RequestError):
    def __init__(self, current: str, new: str):
        self.current = current
        self.new = new
        super().__init__(f"Invalid status transition from '{current}' to '{new}'.")


class ReportError(Exception):
    pass


class UnknownReport(ReportError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Report type '{name}' not found")


class UnknownFormat(ReportError):
    def __init__(self, fmt: str):
        self.format = fmt
        super().__init__(f"Export format '{fmt}' not supported")
