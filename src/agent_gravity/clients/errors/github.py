ExtraInfoType = dict[str, str | None]


def format_error_message(message: str, extra_info: ExtraInfoType | None = None) -> str:
    """Append the extra info that is set to the message, as `message (key: value, ...)`."""

    details: str = ", ".join(f"{key}: {value}" for key, value in (extra_info or {}).items() if value is not None)

    return f"{message} ({details})" if details else message


class ClientError(Exception):
    """Base class for errors raised while reading from GitHub."""

    def __init__(self, message: str, extra_info: ExtraInfoType | None = None):
        super().__init__(format_error_message(message, extra_info))


class RequestError(ClientError):
    """A request to GitHub failed."""

    def __init__(self, action: str, message: str | None = None, extra_info: ExtraInfoType | None = None):
        super().__init__(message="A request to GitHub failed.", extra_info={"action": action, "message": message, **(extra_info or {})})


class ResourceNotFoundError(RequestError):
    """GitHub has no such repository, file or commit."""

    def __init__(self, action: str, resource: str | None = None, extra_info: ExtraInfoType | None = None):
        super().__init__(action=action, message="The resource could not be found.", extra_info={"resource": resource, **(extra_info or {})})


class ResourceTypeMismatchError(RequestError):
    """GitHub returned a different kind of resource than requested, e.g. a directory listing instead of a file."""

    def __init__(self, action: str, resource: str, expected_type: type, actual_type: type):
        super().__init__(action=action, message=f"{resource}: Expected {expected_type.__name__}, got {actual_type.__name__}")


class ScanError(ClientError):
    """The repository tree could not be listed, so no scan was possible."""

    def __init__(self, owner: str, repo: str, branch: str | None, cause: BaseException):
        super().__init__(
            message="Failed to fetch repository tree.",
            extra_info={"repository": f"{owner}/{repo}", "branch": branch, "cause": str(cause)},
        )
