import os

import pytest

from changelog_generator.changelog import Changelog
from changelog_generator.fetcher import Git, LogSource
from changelog_generator.models import Command
from changelog_generator.template import ChangelogTemplate

FIXTURES_DIR = os.path.join(os.path.dirname(__file__), "fixtures")
CONFIG = os.path.join(FIXTURES_DIR, "changelog.yml")
CONFIG_PROJECTS = os.path.join(FIXTURES_DIR, "changelog_projects.yml")
CONFIG_SINCE_COMMIT = os.path.join(FIXTURES_DIR, "changelog_projects_since_commit.yml")


class FakeLogSource(LogSource):
    """Returns a canned `git log` output."""

    def __init__(self, log: str) -> None:
        self.log = log

    def get_log(self) -> str:
        return self.log


def generate_changelog(log, config=CONFIG, project=None, command=Command.GENERATE):
    template = ChangelogTemplate.from_file(config)
    git = Git(FakeLogSource(log))
    return Changelog(template, git).generate(project, command)


@pytest.fixture
def template():
    return ChangelogTemplate.from_file(CONFIG)


@pytest.fixture
def projects_template():
    return ChangelogTemplate.from_file(CONFIG_PROJECTS)


@pytest.fixture
def sections(template):
    return template.build_sections()
