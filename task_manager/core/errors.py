from __future__ import annotations


class TaskManagerError(Exception):
    """Base class for domain errors mapped to HTTP responses by the API layer."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ResourceNotFoundError(TaskManagerError):
    status_code = 404


class OperationNotAllowedError(TaskManagerError):
    status_code = 405

    def __init__(self, message: str = "Operation not possible"):
        super().__init__(message)


class ConflictError(TaskManagerError):
    status_code = 409


class InvalidReferenceError(TaskManagerError):
    status_code = 400
