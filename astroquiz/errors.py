class QuizError(Exception):
    """Base for errors that map onto an HTTP status and a stable message."""

    status_code = 500
    message = "An unexpected error occurred."

    def __init__(self, message=None, details=None):
        super().__init__(message or self.message)
        if message:
            self.message = message
        self.details = details

    def to_dict(self):
        body = {"message": self.message}
        if self.details:
            body["details"] = self.details
        return body


class ValidationError(QuizError):
    status_code = 400
    message = "Invalid data"


class RegistrationClosed(QuizError):
    status_code = 403
    message = "Registration is currently closed"


class QuizInactive(QuizError):
    status_code = 403
    message = "Quiz is currently inactive"


class AlreadyCompleted(QuizError):
    status_code = 403
    message = "Quiz already completed"


class NotFound(QuizError):
    status_code = 404
    message = "Not found"


class Unauthorized(QuizError):
    status_code = 401
    message = "Admin access required"


class CodeSpaceExhausted(QuizError):
    status_code = 500
    message = "Could not allocate a unique passcode"


class SoloRegistrationClosed(RegistrationClosed):
    message = "Solo registration is currently closed"


class SchoolRegistrationClosed(RegistrationClosed):
    message = "School registration is currently closed"
