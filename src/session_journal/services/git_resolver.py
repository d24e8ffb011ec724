"""Git metadata resolver: reads .git for branch and remote info."""

import logging
from pathlib import Path

from session_journal.utils.path_codec import project_from_cwd, repo_name_from_url

logger = logging.getLogger(__name__)


def resolve_git_branch(project_path: str) -> str:
    """Read the current git branch from a project path.

    Handles both regular repos and worktrees (.git as file with gitdir pointer).
    """
    head_path = _git_dir(project_path)
    if head_path is None:
        return ""
    head_path = head_path / "HEAD"

    try:
        if not head_path.exists():
            return ""
        head = head_path.read_text().strip()
    except OSError:
        logger.debug("Failed to resolve git branch for %s", project_path, exc_info=True)
        return ""

    if head.startswith("ref: refs/heads/"):
        return head[len("ref: refs/heads/"):]
    # Detached HEAD: return short hash
    return head[:8] if len(head) >= 8 else head


def resolve_remote_url(project_path: str) -> str:
    """Read the origin remote URL from a project's git config."""
    git_dir = _git_dir(project_path)
    if git_dir is None:
        return ""

    config_path = git_dir / "config"
    if (Path(project_path) / ".git").is_file():
        # For worktrees, the main repo config is two levels up
        main_config = git_dir.parent.parent / "config"
        if main_config.exists():
            config_path = main_config

    if not config_path.exists():
        return ""
    return _parse_remote_url(config_path)


def resolve_project_name(cwd: str) -> str:
    """Name the project after its origin remote, else the directory basename.

    The remote name stays stable across worktrees and renamed checkouts.
    """
    if cwd:
        name = repo_name_from_url(resolve_remote_url(cwd))
        if name:
            return name
    return project_from_cwd(cwd)


def _git_dir(project_path: str) -> Path | None:
    """Locate the git directory, following worktree gitdir pointers."""
    if not project_path:
        return None
    git_path = Path(project_path) / ".git"
    try:
        if not git_path.exists():
            return None
        if git_path.is_dir():
            return git_path
        content = git_path.read_text().strip()
    except OSError:
        logger.debug("Failed to read %s", git_path, exc_info=True)
        return None

    if content.startswith("gitdir:"):
        return Path(project_path) / content[len("gitdir:"):].strip()
    return None


def _parse_remote_url(config_path: Path) -> str:
    """Parse the origin remote URL from a git config file."""
    try:
        content = config_path.read_text()
    except OSError:
        return ""

    in_origin = False
    for line in content.splitlines():
        stripped = line.strip()
        if stripped == '[remote "origin"]':
            in_origin = True
            continue
        if in_origin:
            if stripped.startswith("["):
                break  # Next section
            if stripped.startswith("url"):
                key, _, value = stripped.partition("=")
                if key.strip() == "url":
                    return value.strip()
    return ""
