import json
from textwrap import dedent
from typing import Any

from pydantic import BaseModel, TypeAdapter

ALLOWED_STRUCTURAL_SAMPLING_TYPES = BaseModel | list[BaseModel]


def object_in_text_instructions[T: ALLOWED_STRUCTURAL_SAMPLING_TYPES](object_type: type[T]) -> str:
    """Return instructions asking for exactly one JSON block holding an object of the given type."""

    json_schema: dict[str, Any] = TypeAdapter[T](object_type).json_schema()

    return dedent(
        f"""
The only valid response to this request is a structured object of type {object_type.__name__}.

The schema for the object is:
```json
{json.dumps(obj=json_schema, indent=1)}
```

Place the JSON between ``` tags, format it densely with single space indentation, close every array, object and string,
and do not leave trailing commas. Any response other than exactly one json block for {object_type.__name__} is invalid."""
    ).strip()


def extract_json_blocks_from_text(text: str) -> list[str]:
    """Extract the contents of every fenced block in a text string."""

    matches: list[str] = []
    block_lines: list[str] | None = None

    for line in text.strip().split("\n"):
        if not line.strip().startswith("```"):
            if block_lines is not None:
                block_lines.append(line)
            continue

        if block_lines is None:
            block_lines = []
            continue

        matches.append("\n".join(block_lines))
        block_lines = None

    return matches


def extract_single_object_from_text[T: ALLOWED_STRUCTURAL_SAMPLING_TYPES](text: str, object_type: type[T]) -> T:
    """Validate the single Markdown JSON block in the text as the given type.

    Raises:
        ValueError: If the text does not contain exactly one block.
        pydantic.ValidationError: If the block does not validate.
    """

    matches: list[str] = extract_json_blocks_from_text(text)

    if len(matches) != 1:
        msg = f"Text must contain exactly one Markdown JSON block, found {len(matches)}."
        raise ValueError(msg)

    return TypeAdapter[T](object_type).validate_json(matches[0])
