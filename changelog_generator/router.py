"""
Project attribution for multi-project repositories.

The router decides whether a change belongs to the changelog being built.
Commits are fed to it newest-first; once the configured cut-over commit has
been passed, every older commit is attributed to the default project.
"""

import enum
import logging
from typing import Iterable, Optional, Union

from .errors import AttributionError

logger = logging.getLogger("changelog-generator.router")


class _ForceCheckAll:
    def __repr__(self) -> str:
        return "FORCE_CHECK_ALL"


# requested-project value used by `check` runs: validate every commit's
# attribution without filtering any of them out
FORCE_CHECK_ALL = _ForceCheckAll()

ProjectFilter = Union[None, str, _ForceCheckAll]


class RoutingPhase(enum.Enum):
    NO_DEFAULT = "no-default"
    BEFORE_CUTOVER = "before-cutover"
    AFTER_CUTOVER = "after-cutover"


class ProjectRouter:
    """
    Route changes to projects.

    Args:
        projects: Names of the configured projects (empty for a
            single-project repository).
        requested: The project whose changelog is built, ``None`` for no
            filtering, or :data:`FORCE_CHECK_ALL`.
        default_project: Project assumed for commits older than the
            cut-over commit.
        cutover_commit_id: Commit since which the project must be stated
            explicitly.
    """

    def __init__(
        self,
        projects: Iterable[str],
        requested: ProjectFilter = None,
        default_project: Optional[str] = None,
        cutover_commit_id: Optional[str] = None,
    ) -> None:
        self.projects = list(projects)
        self.requested = requested
        self.default_project = default_project
        self.cutover_commit_id = cutover_commit_id
        self.phase = RoutingPhase.BEFORE_CUTOVER if default_project else RoutingPhase.NO_DEFAULT
        self._cutover_seen = False

    @property
    def active_default(self) -> Optional[str]:
        if self.phase is RoutingPhase.AFTER_CUTOVER:
            return self.default_project
        return None

    @property
    def enabled(self) -> bool:
        return self.requested is not None or bool(self.projects)

    def advance(self, commit_id: str) -> None:
        """Move the state machine to the next commit."""
        if self.phase is RoutingPhase.NO_DEFAULT:
            return
        if self._cutover_seen and self.phase is RoutingPhase.BEFORE_CUTOVER:
            logger.debug("Cut-over commit passed, assuming project '%s'", self.default_project)
            self.phase = RoutingPhase.AFTER_CUTOVER
        if self.cutover_commit_id and commit_id == self.cutover_commit_id:
            self._cutover_seen = True

    def effective_project(self, project: Optional[str]) -> Optional[str]:
        """Project a change declaring ``project`` is attributed to."""
        return self.active_default or project

    def in_scope(self, project: Optional[str], raw: str) -> bool:
        """
        Check whether a change declaring ``project`` belongs to the
        requested changelog.

        Raises:
            AttributionError: If the project is unknown or cannot be
                determined.
        """
        if not self.enabled:
            return True

        name = self.effective_project(project)
        if name is None:
            raise AttributionError("Missing 'project' key", raw)
        if name not in self.projects:
            raise AttributionError(
                f"Incorrect (not allowed in config file) project name '{name}'", raw
            )

        if self.requested is None or self.requested is FORCE_CHECK_ALL:
            return True
        return name == self.requested
