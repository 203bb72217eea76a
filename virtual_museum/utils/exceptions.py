class ServiceError(Exception):
    status = 400

    def __init__(self, code="SERVICE_ERROR", message="Service error", details=None, status=None):
        self.code = code
        self.message = message
        self.details = details or {}
        if status is not None:
            self.status = status
        super().__init__(message)


class MissingScopeError(ServiceError):
    def __init__(self, message="Museum ID not found in user profile"):
        super().__init__(code="MISSING_SCOPE", message=message)


class ReferentialIntegrityError(ServiceError):
    """One or more artifact references are unknown or owned by another museum."""

    def __init__(self, missing=(), foreign=()):
        self.missing = sorted(missing)
        self.foreign = sorted(foreign)
        super().__init__(
            code="REFERENTIAL_INTEGRITY",
            message="Some artifacts do not belong to your museum",
            details={"missing": self.missing, "foreign": self.foreign},
        )


class InvalidTransitionError(ServiceError):
    def __init__(self, current_status, operation):
        self.current_status = current_status
        self.operation = operation
        super().__init__(
            code="INVALID_TRANSITION",
            message=f"Cannot {operation.replace('_', ' ')} a submission that is {current_status}",
            details={"current_status": current_status, "operation": operation},
        )


class EmptyContentError(ServiceError):
    def __init__(self, message="Cannot submit submission without any artifacts"):
        super().__init__(code="EMPTY_CONTENT", message=message)


class NotFoundError(ServiceError):
    status = 404

    def __init__(self, message="Virtual museum submission not found"):
        super().__init__(code="NOT_FOUND", message=message)


class ForbiddenError(ServiceError):
    status = 403

    def __init__(self, message="Access denied"):
        super().__init__(code="FORBIDDEN", message=message)


class ValidationFailed(ServiceError):
    status = 422

    def __init__(self, messages):
        super().__init__(code="VALIDATION_ERROR", message="Invalid request payload", details=messages)
