class ApplicationError(Exception):
    """Base class for errors raised while handling a webhook request.

    The status code is used as the HTTP status of the error response.
    """

    status_code = 500


class InvalidRequestError(ApplicationError):
    status_code = 400


class NamespaceLookupError(InvalidRequestError):
    pass


class PatchError(ApplicationError):
    pass


class ResponseError(ApplicationError):
    pass


class ProviderError(ApplicationError):
    pass
