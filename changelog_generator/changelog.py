"""
Changelog assembly.

Runs every commit through metadata parsing, project routing, title and
description inheritance and section aggregation, then renders the result.
"""

import logging
from typing import List, Optional

from .aggregator import SectionAggregator
from .errors import ConfigError, ExtractionError
from .fetcher import Git
from .generator import ChangelogRenderer
from .models import ChangeEntry, Command, CommitRecord, MultiProjectEntry, SkipEntry
from .parser import MetadataParser
from .resolver import TitleDescriptionResolver
from .router import FORCE_CHECK_ALL, ProjectFilter, ProjectRouter
from .template import ChangelogTemplate

logger = logging.getLogger("changelog-generator.changelog")


class Changelog:
    """
    Build a changelog from the commit history.

    Args:
        template: Parsed configuration file.
        git: Commit history to process.
        renderer: Renderer of the final document.
    """

    def __init__(
        self,
        template: ChangelogTemplate,
        git: Git,
        renderer: Optional[ChangelogRenderer] = None,
    ) -> None:
        self.template = template
        self.git = git
        self.renderer = renderer or ChangelogRenderer()

    def generate(self, project: Optional[str] = None, command: Command = Command.GENERATE) -> str:
        """
        Process the history and return the markdown changelog.

        In ``check`` mode every commit is validated but an empty string is
        returned.

        Args:
            project: Project whose changelog is built (multi-project
                repositories only).
            command: Whether to generate the changelog or only check commits.

        Raises:
            ChangelogError: On the first invalid commit or option.
        """
        projects = self.template.project_names
        requested = self._requested_project(project, command, projects)
        settings = self.template.settings.projects_settings

        router = ProjectRouter(
            projects,
            requested=requested,
            default_project=settings.default_project,
            cutover_commit_id=settings.since_commit,
        )
        sections = self.template.build_sections()
        aggregator = SectionAggregator(sections)

        skip_commits = self.template.settings.skip_commits

        count = 0
        for commit in self.git.commits():
            router.advance(commit.commit_id)
            if is_skipped(commit.commit_id, skip_commits):
                logger.debug("Commit %s is listed in 'skip-commits'", commit.commit_id)
                continue
            process_commit(commit, router, aggregator)
            count += 1
        logger.info("Processed %d commits", count)

        if command is Command.CHECK:
            return ""
        return self.renderer.generate_markdown(sections)

    @staticmethod
    def _requested_project(project: Optional[str], command: Command, projects: List[str]) -> ProjectFilter:
        if project is not None:
            if not projects:
                raise ConfigError(
                    f"Omit project option '{project}', repository is not configured as multi-project."
                )
            if project not in projects:
                raise ConfigError(f"Project '{project}' not configured in config file")

        if command is Command.CHECK and projects:
            # validate the attribution of all commits without picking a project
            return FORCE_CHECK_ALL

        if project is None and projects:
            raise ConfigError("You need to specify project name. Use '--help' for more information.")
        return project


def is_skipped(commit_id: str, skip_commits: List[str]) -> bool:
    # abbreviated commit IDs are accepted
    return any(commit_id.startswith(skipped) for skipped in skip_commits)


def process_commit(commit: CommitRecord, router: ProjectRouter, aggregator: SectionAggregator) -> None:
    """Parse one commit and add its in-scope changes to the sections."""
    metadata = MetadataParser.parse_commit(commit)

    if isinstance(metadata, SkipEntry):
        logger.debug("Commit %s skipped", commit.commit_id)
        return

    entries: List[ChangeEntry]
    if isinstance(metadata, MultiProjectEntry):
        entries = []
        for override in metadata.projects:
            if router.in_scope(override.name, commit.raw) and not override.skip:
                entries.append(override.to_entry())
    else:
        entries = [metadata] if router.in_scope(metadata.project, commit.raw) else []

    for entry in entries:
        title, description = _resolve(entry, commit)
        aggregator.add(entry, title, description, commit.raw)


def _resolve(entry: ChangeEntry, commit: CommitRecord):
    try:
        return TitleDescriptionResolver.resolve(entry, commit.message)
    except ExtractionError as e:
        raise e.with_commit(commit.raw) from e
