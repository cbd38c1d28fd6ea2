from collections.abc import Sequence
from typing import Self

from githubkit.versions.v2022_11_28.models import GitTree
from pydantic import BaseModel, Field


def get_dir_and_file_from_path(path: str) -> tuple[str, str]:
    path_parts = path.split("/")
    directory_path = "/".join(path_parts[:-1])
    file_path = path_parts[-1]
    return directory_path, file_path


class RepositoryTree(BaseModel):
    """The files of a repository at a ref, as repository-relative paths in tree order."""

    files: list[str] = Field(description="The repository-relative paths of every file (blob) in the tree.")
    truncated: bool = Field(
        default=False,
        description="Whether GitHub truncated the tree listing. If true, the results do not contain all files.",
    )

    @classmethod
    def from_git_tree(cls, git_tree: GitTree) -> Self:
        # Only blobs are files; trees (directories) and commits (submodules) are skipped.
        files: list[str] = [tree_item.path for tree_item in git_tree.tree if tree_item.type == "blob"]

        return cls(files=files, truncated=git_tree.truncated)

    @classmethod
    def from_paths(cls, paths: Sequence[str]) -> Self:
        return cls(files=list(paths))

    def file_paths(self) -> list[str]:
        """Return all files in the tree."""
        return list(self.files)
