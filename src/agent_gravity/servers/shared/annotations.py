from typing import Annotated

from pydantic import Field

OWNER = Annotated[str, "The owner of the repository."]
REPO = Annotated[str, "The name of the repository."]
BRANCH = Annotated[
    str | None, Field(default=None, description="The branch to scan. If not provided, the repository's default branch is scanned.")
]

REPOSITORY_ID = Annotated[str, "The dashboard id of the repository."]

LIMIT_DESCRIPTION = "The maximum number of records to return, newest first. If not provided, every record is returned."
LIMIT = Annotated[int | None, Field(default=None, description=LIMIT_DESCRIPTION)]
