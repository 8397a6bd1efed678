class GradingError(Exception):
    status_code = 500

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(GradingError):
    status_code = 400


class InvalidConfig(ValidationError):
    """A test case range or index list that does not fit the problem."""

    def __init__(self, message: str, category: str = None, offending=None):
        super().__init__(message)
        self.category = category
        self.offending = offending


class NotFoundError(GradingError):
    status_code = 404


class ExternalServiceError(GradingError):
    status_code = 502


class JudgeTimeout(GradingError):
    status_code = 408
