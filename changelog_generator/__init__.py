"""
Changelog Generator - build a user-facing changelog from changelog blocks in commit messages.
"""

from .models import CommitRecord, ChangeEntry, MultiProjectEntry, ProjectOverride, Section, SkipEntry
from .errors import AttributionError, ChangelogError, ConfigError, ExtractionError, GitError, SchemaError
from .fetcher import Git, GitHubSource, GitLogCommand, StdinSource
from .template import ChangelogTemplate
from .changelog import Changelog
from .main import main

__all__ = [
    'CommitRecord',
    'ChangeEntry',
    'MultiProjectEntry',
    'ProjectOverride',
    'Section',
    'SkipEntry',
    'ChangelogError',
    'SchemaError',
    'AttributionError',
    'ExtractionError',
    'ConfigError',
    'GitError',
    'Git',
    'GitLogCommand',
    'StdinSource',
    'GitHubSource',
    'ChangelogTemplate',
    'Changelog',
    'main'
]
