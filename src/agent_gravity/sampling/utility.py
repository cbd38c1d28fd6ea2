from collections.abc import Sequence
from typing import TYPE_CHECKING

from fastmcp.server.dependencies import get_context
from fastmcp.utilities.logging import get_logger
from mcp.types import ClientCapabilities, SamplingCapability, SamplingMessage, TextContent
from pydantic import ValidationError

from agent_gravity.sampling.extract import (
    ALLOWED_STRUCTURAL_SAMPLING_TYPES,
    extract_single_object_from_text,
    object_in_text_instructions,
)
from agent_gravity.servers.shared.errors import StructuredSamplingValidationError
from agent_gravity.servers.shared.utility import estimate_model_tokens, estimate_tokens

if TYPE_CHECKING:
    from fastmcp.server import Context

logger = get_logger(__name__)

DEFAULT_SAMPLING_MAX_TOKENS = 2000
DEFAULT_STRUCTURED_SAMPLING_RETRIES = 3


def new_user_sampling_message(content: str | list[str]) -> SamplingMessage:
    text: str = "\n".join(content) if isinstance(content, list) else content

    return SamplingMessage(role="user", content=TextContent(type="text", text=text))


async def sample(
    system_prompt: str,
    messages: Sequence[SamplingMessage],
    *,
    max_tokens: int = DEFAULT_SAMPLING_MAX_TOKENS,
    temperature: float = 0.0,
) -> tuple[str, SamplingMessage]:
    """Sample a text completion through the context of the current request.

    Returns the text along with the assistant message that carries it, so the conversation can be continued.
    """

    context: Context = get_context()

    prompt_tokens: int = estimate_tokens(system_prompt) + estimate_model_tokens(basemodel=messages)
    logger.info(f"Requesting a completion for a prompt of about {prompt_tokens} tokens.")

    completion = await context.sample(
        system_prompt=system_prompt,
        messages=[*messages],
        temperature=temperature,
        max_tokens=max_tokens,
    )

    if not isinstance(completion, TextContent):
        msg = f"Expected a text completion, got {type(completion).__name__}."
        raise TypeError(msg)

    logger.info(f"Received a completion of about {estimate_tokens(completion.text)} tokens.")

    return completion.text, SamplingMessage(role="assistant", content=completion)


async def structured_sample[T: ALLOWED_STRUCTURAL_SAMPLING_TYPES](
    system_prompt: str,
    messages: Sequence[SamplingMessage],
    *,
    response_model: type[T],
    max_tokens: int = DEFAULT_SAMPLING_MAX_TOKENS,
    temperature: float = 0.0,
    retries: int = DEFAULT_STRUCTURED_SAMPLING_RETRIES,
) -> T:
    """Sample a completion that must validate as `response_model`.

    Each invalid completion is kept in the conversation together with the validation error, so the next attempt can
    correct it.

    Raises:
        StructuredSamplingValidationError: If no completion validated within the retries.
    """

    conversation: list[SamplingMessage] = [*messages, new_user_sampling_message(object_in_text_instructions(response_model))]

    for attempt in range(1, retries + 1):
        completion, assistant_message = await sample(
            system_prompt=system_prompt, messages=conversation, max_tokens=max_tokens, temperature=temperature
        )

        try:
            return extract_single_object_from_text(completion, object_type=response_model)
        except (ValidationError, ValueError) as e:
            feedback = f"Attempt {attempt} of {retries} is not a valid {response_model.__name__}, please correct it: {e}"
            logger.warning(feedback)

            conversation.extend([assistant_message, new_user_sampling_message(feedback)])

    raise StructuredSamplingValidationError(response_model=response_model, retries=retries)


def sampling_is_supported() -> bool:
    """Whether this server has its own sampling handler or the connected client can sample."""

    context: Context = get_context()

    return context.fastmcp.sampling_handler is not None or context.session.check_client_capability(
        capability=ClientCapabilities(sampling=SamplingCapability())
    )
