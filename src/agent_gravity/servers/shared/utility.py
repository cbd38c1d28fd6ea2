import base64
from collections.abc import Sequence
from typing import Any

import yaml
from githubkit.response import Response
from pydantic import BaseModel

GITHUBKIT_RESPONSE_TYPE = BaseModel | Sequence[BaseModel]


def estimate_tokens(text: str) -> int:
    """Estimate the number of tokens for a given text."""
    return len(text) // 4


def estimate_model_tokens(basemodel: BaseModel | Sequence[BaseModel]) -> int:
    """Estimate the number of tokens for a given base model."""
    if isinstance(basemodel, Sequence):
        return sum(estimate_model_tokens(item) for item in basemodel)

    return estimate_tokens(basemodel.model_dump_json())


def extract_response[T: GITHUBKIT_RESPONSE_TYPE](response: Response[T], /) -> T:
    """Extract the response from a response."""

    return response.parsed_data


def decode_content(content: str) -> str:
    return base64.b64decode(content).decode("utf-8")


def dump_yaml(value: Any) -> str:  # pyright: ignore[reportAny]
    return yaml.safe_dump(value, indent=1, sort_keys=False, width=400)


def dump_model_as_yaml(model: BaseModel | Sequence[BaseModel], /) -> str:
    if isinstance(model, BaseModel):
        return dump_yaml(model.model_dump(mode="json", exclude_none=True))

    return "\n".join([dump_yaml(item.model_dump(mode="json", exclude_none=True)) for item in model])
