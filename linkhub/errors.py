class HubError(Exception):
    """Base for user-facing rejections. Carries the HTTP status the API returns."""

    status_code = 400

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class ValidationFailed(HubError):
    status_code = 400


class LinkValidationError(ValidationFailed):
    pass


class AuthenticationFailed(HubError):
    status_code = 401


class AdminRequired(HubError):
    status_code = 403


class LinkNotFound(HubError):
    status_code = 404


class PresetNotFound(HubError):
    status_code = 404


class ConfirmationRequired(HubError):
    status_code = 409
