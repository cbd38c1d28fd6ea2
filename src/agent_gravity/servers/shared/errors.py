from agent_gravity.clients.errors.github import ExtraInfoType, format_error_message


class ServerError(Exception):
    """Base class for errors raised by the Agent Gravity tools."""

    def __init__(self, message: str, extra_info: ExtraInfoType | None = None):
        super().__init__(format_error_message(message, extra_info))


class SamplingSupportRequiredError(ServerError):
    def __init__(self):
        super().__init__(message="Your client does not support sampling. Sampling support is required to analyze repository activity.")


class RepositoryNotFoundError(ServerError):
    """The dashboard has no repository with the given id."""

    def __init__(self, repository_id: str):
        super().__init__(message="Repository not found.", extra_info={"repository_id": repository_id})


class StructuredSamplingValidationError(ServerError):
    """The sampled response never validated against the requested model."""

    def __init__(self, response_model: type, retries: int):
        super().__init__(
            message="The sampling call failed to generate a valid structured response.",
            extra_info={"response_model": response_model.__name__, "retries": str(retries)},
        )
