import subprocess
from pathlib import Path
from typing import Any

from block_config.errors import SourceUnreadable
from block_config.source import ConfigSource


def _run_git(cwd: Path, args: list[str], encoding: str = "utf-8") -> str:
    result = subprocess.run(
        ["git", *args],
        cwd=cwd,
        capture_output=True,
        encoding=encoding,
        check=True,
    )
    return result.stdout


class GitConfigSource(ConfigSource):
    """
    Configuration file as committed in a git repository.

    Every read resolves ``revision`` again, so re-parsing after a new commit
    (or after moving a branch) picks the change up.
    """

    def __init__(
        self,
        repo_path: str | Path,
        path: str,
        revision: str = "HEAD",
        encoding: str = "utf-8",
    ) -> None:
        self.repo_path = Path(repo_path).absolute()
        self.path = path
        self.revision = revision
        self.encoding = encoding
        self.name = f"{self.repo_path}@{revision}:{path}"

    def _repr_pretty_(self, p: Any, cycle: bool) -> None:
        if cycle:
            p.text("GitConfigSource(...)")
        else:
            p.text(f"GitConfigSource(revision={self.revision}, path={self.path})")

    def resolve(self) -> str:
        """Commit hash the revision currently points at."""
        try:
            return _run_git(self.repo_path, ["rev-parse", self.revision]).strip()
        except (subprocess.CalledProcessError, OSError) as e:
            raise SourceUnreadable(self.name, f"cannot resolve revision: {e}") from e

    def read(self, encoding: str | None = None) -> str:
        encoding = encoding or self.encoding
        try:
            # git show <revision>:<path>
            return _run_git(
                self.repo_path,
                ["show", f"{self.revision}:{self.path}"],
                encoding=encoding,
            )
        except subprocess.CalledProcessError as e:
            raise SourceUnreadable(self.name, (e.stderr or "").strip() or str(e)) from e
        except UnicodeDecodeError as e:
            raise SourceUnreadable(self.name, f"not valid {encoding}: {e}") from e
        except OSError as e:
            raise SourceUnreadable(self.name, str(e)) from e


def create_git_config_source(
    repo_path: str | Path,
    path: str,
    revision: str = "HEAD",
    encoding: str = "utf-8",
) -> GitConfigSource:
    return GitConfigSource(repo_path, path, revision, encoding)
