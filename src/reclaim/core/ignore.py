"""Ignore-rule evaluation backed by git itself.

Delegating to ``git check-ignore`` gives the exact precedence model git
uses: the top-level and nested ``.gitignore`` files, ``info/exclude`` and
``core.excludesFile``, last match wins, and negated patterns re-include.

Every failure raises :class:`IgnoreEvaluationError`.  Callers treat that
as "not ignored" and never delete anything based on it.
"""

from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path

from reclaim.models.scan_result import IgnoreVerdict, RepositoryRoot

log = logging.getLogger(__name__)

_GIT = "git"

# Timeout for a single git invocation (seconds).
_GIT_TIMEOUT = 30

# Variables that would point git at some other repository than the one asked about.
_SCOPE_ENV_VARS = (
    "GIT_DIR",
    "GIT_WORK_TREE",
    "GIT_INDEX_FILE",
    "GIT_COMMON_DIR",
    "GIT_OBJECT_DIRECTORY",
    "GIT_ALTERNATE_OBJECT_DIRECTORIES",
    "GIT_NAMESPACE",
    "GIT_PREFIX",
)

# Global pathspec modes; check-ignore refuses to run under any of them.
_PATHSPEC_ENV_VARS = (
    "GIT_LITERAL_PATHSPECS",
    "GIT_GLOB_PATHSPECS",
    "GIT_NOGLOB_PATHSPECS",
    "GIT_ICASE_PATHSPECS",
)


class IgnoreEvaluationError(Exception):
    """Raised when the ignore status of a path cannot be determined."""


def _git_env() -> dict[str, str]:
    dropped = _SCOPE_ENV_VARS + _PATHSPEC_ENV_VARS
    env = {k: v for k, v in os.environ.items() if k not in dropped}
    env["GIT_OPTIONAL_LOCKS"] = "0"
    env["GIT_TERMINAL_PROMPT"] = "0"
    return env


def _run_git(
    cwd: Path,
    *args: str,
    input: bytes | None = None,
    literal: bool = False,
) -> subprocess.CompletedProcess[bytes]:
    cmd = [_GIT, "-C", str(cwd)]
    if literal:
        cmd.append("--literal-pathspecs")
    cmd.extend(args)
    stdin = {"input": input} if input is not None else {"stdin": subprocess.DEVNULL}
    try:
        return subprocess.run(
            cmd,
            capture_output=True,
            env=_git_env(),
            timeout=_GIT_TIMEOUT,
            **stdin,
        )
    except FileNotFoundError:
        raise IgnoreEvaluationError("git executable not found")
    except subprocess.TimeoutExpired:
        raise IgnoreEvaluationError(f"git {args[0]} timed out after {_GIT_TIMEOUT}s in {cwd}")
    except OSError as exc:
        raise IgnoreEvaluationError(f"Cannot run git in {cwd}: {exc}")


def _stderr(proc: subprocess.CompletedProcess[bytes]) -> str:
    text = os.fsdecode(proc.stderr).strip()
    return text.splitlines()[-1] if text else f"exit {proc.returncode}"


class IgnoreOracle:
    """Answers "is this directory ignored?" for one repository.

    Instances are scoped to a single work tree; rules of enclosing
    repositories are never consulted.  Not shared between threads.
    """

    def __init__(self, root: Path) -> None:
        self._root = root

    @property
    def root(self) -> Path:
        return self._root

    @classmethod
    def open(cls, root: RepositoryRoot | Path) -> IgnoreOracle:
        """Verify that git can read the repository at *root*.

        Raises:
            IgnoreEvaluationError: If git is missing, the metadata is
                unreadable, or git resolves a different work tree.
        """
        path = root.path if isinstance(root, RepositoryRoot) else Path(root)
        proc = _run_git(path, "rev-parse", "--show-toplevel")
        if proc.returncode != 0:
            raise IgnoreEvaluationError(f"Cannot read repository metadata: {_stderr(proc)}")

        toplevel = Path(os.fsdecode(proc.stdout.rstrip(b"\n")))
        try:
            same = toplevel.resolve() == path.resolve()
        except OSError as exc:
            raise IgnoreEvaluationError(f"Cannot resolve work tree: {exc}")
        if not same:
            # A broken .git marker makes git fall back to an enclosing repository.
            raise IgnoreEvaluationError(f"git resolves the work tree to {toplevel}, not {path}")

        log.debug("Opened ignore oracle for %s", path)
        return cls(path.resolve())

    def is_ignored(self, path: Path) -> bool:
        """Return True only when git positively reports *path* as ignored."""
        return self.verdict(path).ignored

    def verdict(self, path: Path) -> IgnoreVerdict:
        """Evaluate the ignore rules for the directory at *path*.

        Raises:
            IgnoreEvaluationError: If git fails or its answer cannot be parsed.
        """
        rel = self._relative(path)
        # A leading ':' would be parsed as pathspec magic, which check-ignore rejects.
        query = os.fsencode(f"./{rel}" if rel.startswith(":") else rel)
        proc = _run_git(
            self._root,
            "check-ignore", "--verbose", "--non-matching", "--stdin", "-z",
            input=query + b"\0",
        )
        # 0 and 1 both carry a full record because of --non-matching.
        if proc.returncode not in (0, 1):
            raise IgnoreEvaluationError(f"git check-ignore failed for {rel}: {_stderr(proc)}")

        fields = proc.stdout.split(b"\0")
        if len(fields) != 5 or fields[4] or fields[3] not in (query, os.fsencode(rel)):
            raise IgnoreEvaluationError(f"Unexpected git check-ignore output for {rel}: {proc.stdout!r}")

        source, line, pattern = (os.fsdecode(f) for f in fields[:3])
        if not pattern:
            return IgnoreVerdict(path, ignored=False)

        rule = f"{source}:{line}:{pattern}"
        if pattern.startswith("!"):
            return IgnoreVerdict(path, ignored=False, rule=rule)
        if self._has_tracked_files(rel):
            log.info("Not treating %s as ignored: it contains tracked files", path)
            return IgnoreVerdict(path, ignored=False, rule=rule)
        return IgnoreVerdict(path, ignored=True, rule=rule)

    def _has_tracked_files(self, rel: str) -> bool:
        proc = _run_git(self._root, "ls-files", "-z", "--", rel, literal=True)
        if proc.returncode != 0:
            raise IgnoreEvaluationError(f"git ls-files failed for {rel}: {_stderr(proc)}")
        return bool(proc.stdout)

    def _relative(self, path: Path) -> str:
        try:
            rel = Path(path).relative_to(self._root)
        except ValueError:
            raise IgnoreEvaluationError(f"{path} is outside of {self._root}")
        if rel == Path(".") or ".." in rel.parts:
            raise IgnoreEvaluationError(f"Refusing to evaluate {path}")
        return rel.as_posix()
