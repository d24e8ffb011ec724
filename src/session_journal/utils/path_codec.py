"""Path helpers: shorten file paths, name projects, place session notes."""

from pathlib import PurePosixPath
from urllib.parse import urlparse

UNKNOWN_PROJECT = "_unknown"

SESSIONS_DIRNAME = "Sessions"


def shorten_path(path: str, cwd: str) -> str:
    """Make a path relative to cwd when it lives underneath it.

    /home/wiz/app/src/main.py, /home/wiz/app → src/main.py
    """
    if cwd and path.startswith(cwd.rstrip("/") + "/"):
        return path[len(cwd.rstrip("/")) + 1:]
    return path


def project_from_cwd(cwd: str) -> str:
    """Get the last path segment as the project name.

    /home/wiz/projects/myapp → myapp
    """
    if not cwd:
        return UNKNOWN_PROJECT
    name = PurePosixPath(cwd.rstrip("/")).name
    if not name or name == ".":
        return UNKNOWN_PROJECT
    return name


def repo_name_from_url(raw_url: str) -> str:
    """Extract the repository name from a git remote URL.

    git@github.com:wiz/myapp.git → myapp
    https://github.com/wiz/myapp → myapp
    """
    raw_url = raw_url.strip()
    if not raw_url:
        return ""

    if "://" not in raw_url and ":" in raw_url:
        # SCP-style: git@host:path
        path = raw_url.split(":", 1)[1]
    else:
        path = urlparse(raw_url).path

    if not path:
        return ""
    name = PurePosixPath(path.rstrip("/")).name
    if name.endswith(".git"):
        name = name[:-4]
    if not name or name in (".", "/"):
        return ""
    return name


def note_filename(date: str, iteration: int) -> str:
    """2026-02-13, 2 → 2026-02-13-02.md"""
    return f"{date}-{iteration:02d}.md"


def note_rel_path(project: str, date: str, iteration: int) -> str:
    """Vault-relative path of a session note."""
    return str(PurePosixPath(SESSIONS_DIRNAME, project, note_filename(date, iteration)))


def note_stem(note_path: str) -> str:
    """Filename without extension, as used for wiki links."""
    return PurePosixPath(note_path).stem
