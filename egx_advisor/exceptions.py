class AppError(Exception):
    def __init__(self, message: str, code: str = "INTERNAL_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class NotFoundError(AppError):
    def __init__(self, resource: str, resource_id: str):
        super().__init__(f"{resource} '{resource_id}' not found", code="NOT_FOUND")


class ValidationError(AppError):
    def __init__(self, message: str):
        super().__init__(message, code="VALIDATION_ERROR")


class ServiceUnavailableError(AppError):
    def __init__(self, message: str):
        super().__init__(message, code="SERVICE_UNAVAILABLE")


class LLMUnavailableError(AppError):
    """Raised when no LLM is configured for a call that requires one."""

    def __init__(self, message: str = "LLM API key is not configured"):
        super().__init__(message, code="LLM_CONFIG_ERROR")
