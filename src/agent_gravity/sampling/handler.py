import os

from fastmcp.experimental.sampling.handlers.openai import OpenAISamplingHandler
from fastmcp.utilities.logging import get_logger
from openai import OpenAI

logger = get_logger(__name__)


def get_sampling_handler() -> OpenAISamplingHandler | None:
    """A server-side sampling handler for clients that cannot sample themselves, if an OpenAI compatible API is configured."""

    if os.getenv("OPENAI_API_KEY"):
        return OpenAISamplingHandler(
            default_model=os.getenv("OPENAI_MODEL") or "gpt-4o",  # pyright: ignore[reportArgumentType]
            client=OpenAI(base_url=os.getenv("OPENAI_BASE_URL")),
        )

    logger.warning(
        msg=(
            "No sampling handler found, analysis requests from clients that do not support sampling will fail. "
            "Set OPENAI_API_KEY (and optionally OPENAI_MODEL and OPENAI_BASE_URL) to use a sampling handler."
        )
    )

    return None
