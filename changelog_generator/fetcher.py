"""
Commit history fetching module.

This module obtains the commit log, either by running ``git log`` on a local
repository, by reading a single commit from standard input (commit-msg hook)
or from the GitHub API using PyGithub, and splits the log into commits.
"""

import logging
import subprocess
import sys
from typing import IO, Iterator, List, Optional

from .errors import GitError
from .models import CommitRecord
from .parser import CommitParser

# External libs
try:
    from github import Github, Commit
except Exception as e:
    raise RuntimeError("PyGithub is required. Install with: pip install PyGithub") from e

# Set up logging
logger = logging.getLogger("changelog-generator.fetcher")

STDIN_HEADER = "commit FROM STDIN\n\n"


class LogSource:
    """Something that produces text in ``git log`` format, newest commit first."""

    def get_log(self) -> str:
        raise NotImplementedError


class GitLogCommand(LogSource):
    """
    Run ``git log`` on a local repository.

    Args:
        path: Path to the git repository.
        commit_id: If given, this commit and all older ones are left out.
    """

    def __init__(self, path: str = "./", commit_id: Optional[str] = None) -> None:
        self.path = path
        self.commit_id = commit_id

    def args(self) -> List[str]:
        args = ["git", "-C", str(self.path), "log"]
        if self.commit_id:
            args.append(f"{self.commit_id}..HEAD")
        return args

    def get_log(self) -> str:
        """
        Return the output of ``git log``.

        Raises:
            GitError: If git cannot be executed or fails.
        """
        args = self.args()
        logger.debug("Running %s", " ".join(args))
        try:
            result = subprocess.run(args, capture_output=True)
        except OSError as e:
            raise GitError(f"Failed to execute '{args[0]}' command: {e}") from e

        if result.returncode != 0:
            stderr = result.stderr.decode("utf-8", errors="replace")
            raise GitError(f"Failed to execute '{' '.join(args)}' command:\n{stderr}")

        return result.stdout.decode("utf-8", errors="replace")


class StdinSource(LogSource):
    """
    Read commit(s) from a stream instead of running ``git log``.

    A commit message that is not committed yet has no header; a fake one is
    added so that it parses like any other commit.
    """

    def __init__(self, stream: Optional[IO[str]] = None) -> None:
        self.stream = stream

    def get_log(self) -> str:
        stream = self.stream if self.stream is not None else sys.stdin
        text = stream.read()
        if not text.startswith("commit "):
            text = STDIN_HEADER + text
        return text


class GitHubSource(LogSource):
    """
    Fetch commits from a GitHub repository using PyGithub.

    Commits are rendered in ``git log`` format so they go through the same
    parsing as local history.

    Args:
        owner: Repository owner username
        repo_name: Repository name
        token: Personal access token (or None for unauthenticated, but rate-limited).
        commit_id: If given, fetching stops before this commit.
        branch: Branch or sha to list commits from; the default branch if None.
    """

    def __init__(
        self,
        owner: str,
        repo_name: str,
        token: Optional[str] = None,
        commit_id: Optional[str] = None,
        branch: Optional[str] = None,
    ) -> None:
        self.owner = owner
        self.repo_name = repo_name
        self.commit_id = commit_id
        self.branch = branch
        try:
            self._g = Github(login_or_token=token) if token else Github()
            logger.debug("GitHub client initialized (authenticated=%s)", bool(token))
        except Exception as e:
            logger.error("Failed to initialize GitHub client: %s", e)
            raise GitError(f"GitHub client initialization failed: {e}") from e

    def get_log(self) -> str:
        """
        Fetch the commit history, most recent first.

        Raises:
            GitError: If commits cannot be fetched
        """
        full_name = f"{self.owner}/{self.repo_name}"
        try:
            repo = self._g.get_repo(full_name)
            commits = repo.get_commits(sha=self.branch) if self.branch else repo.get_commits()

            chunks: List[str] = []
            for c in commits:
                if self.commit_id and c.sha.startswith(self.commit_id):
                    break
                chunks.append(self._format_commit(c))
        except Exception as e:
            error_msg = f"Failed to fetch commits for {full_name}: {e}"
            logger.error(error_msg)
            raise GitError(error_msg) from e

        logger.info("Fetched %d commits from %s", len(chunks), full_name)
        return "\n".join(chunks)

    @staticmethod
    def _format_commit(c: Commit.Commit) -> str:
        commit_obj = c.commit
        lines = [f"commit {c.sha}"]
        if len(c.parents) > 1:
            lines.append("Merge: " + " ".join(p.sha[:7] for p in c.parents))
        if commit_obj.author:
            lines.append(f"Author: {commit_obj.author.name} <{commit_obj.author.email}>")
            if commit_obj.author.date:
                lines.append("Date:   " + commit_obj.author.date.strftime("%a %b %d %H:%M:%S %Y %z"))
        lines.append("")
        for line in commit_obj.message.strip().split("\n"):
            lines.append(f"    {line}" if line else "")
        lines.append("")
        return "\n".join(lines)


def split_commits(log: str) -> Iterator[str]:
    """Lazily split ``git log`` output into the raw text of each commit."""
    if not log:
        return

    pos = 0
    while True:
        end = log.find("\ncommit ", pos + 1)
        if end == -1:
            yield log[pos:]
            return
        yield log[pos:end + 1]
        pos = end + 1


class Git:
    """
    Commit history backed by a :class:`LogSource`.

    Args:
        source: Where the ``git log`` text comes from.
    """

    def __init__(self, source: LogSource) -> None:
        self.source = source

    def commits(self) -> Iterator[CommitRecord]:
        """
        Yield the commits newest-first.

        Merge commits without a changelog block are left out.
        """
        log = self.source.get_log()
        for raw in split_commits(log):
            commit = CommitParser.parse(raw)
            if commit.metadata_text is None and commit.is_merge:
                logger.debug("Skipping merge commit %s", commit.commit_id)
                continue
            yield commit
