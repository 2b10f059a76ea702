"""Shallow git checkouts of the repositories that hold CRDs."""

import logging
from pathlib import Path
from typing import Union

import git

from crddocs.core.errors import AcquisitionError

logger = logging.getLogger(__name__)


def is_repository(path: Union[str, Path]) -> bool:
    """Check whether ``path`` is the root of an existing git checkout."""
    try:
        git.Repo(str(path))
    except (git.exc.InvalidGitRepositoryError, git.exc.NoSuchPathError):
        return False
    return True


def clone_repository_shallow(url: str, ref: str, dest_dir: Union[str, Path]) -> None:
    """Clone a single branch or tag of a repository with depth 1.

    Args:
        url: Repository URL; ``.git`` is appended when missing
        ref: Branch or tag to check out
        dest_dir: Directory to clone into

    Raises:
        AcquisitionError: If git exits with a non-zero status or is missing
    """
    clone_url = url if url.endswith(".git") else f"{url}.git"
    try:
        git.Repo.clone_from(clone_url, str(dest_dir), branch=ref, depth=1)
    except (git.exc.GitCommandError, git.exc.GitCommandNotFound) as e:
        raise AcquisitionError(
            f"Could not `git clone` source repository {clone_url}@{ref}: {e}", url=url, ref=ref
        ) from e


def ensure_checkout(url: str, ref: str, dest_dir: Union[str, Path]) -> Path:
    """Return a checkout of ``url`` at ``ref``, cloning it when absent.

    An existing checkout at ``dest_dir`` is reused as is.

    Raises:
        AcquisitionError: If cloning fails
    """
    dest = Path(dest_dir)
    if is_repository(dest):
        logger.info(f"Reusing existing checkout at {dest}")
        return dest

    logger.info(f"{dest} is not a git repository, cloning {url}@{ref}")
    clone_repository_shallow(url, ref, dest)
    return dest
