"""
Data models for the changelog generator.

This module contains the shared data structures used across all modules:
commit records produced by the commit sources, the parsed changelog metadata
(one dataclass per metadata block shape) and the section tree that collects
rendered changes.
"""

import enum
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union


class Command(enum.Enum):
    """What a run is asked to do."""
    CHECK = "check"
    GENERATE = "gen"


@dataclass(frozen=True)
class CommitRecord:
    """A single commit split into its parts."""
    commit_id: str
    header: str
    message: str
    metadata_text: Optional[str]
    raw: str

    @property
    def is_merge(self) -> bool:
        return "\nMerge: " in self.header


@dataclass(frozen=True)
class SkipEntry:
    """Metadata block saying the commit has nothing worth a changelog line."""


@dataclass
class ChangeEntry:
    """Metadata block given as a single map."""
    section: str
    project: Optional[str] = None
    title: Optional[str] = None
    title_is_enough: bool = False
    description: Optional[str] = None


@dataclass
class ProjectOverride:
    """One element of a metadata block listing several projects."""
    name: str
    skip: bool = False
    section: Optional[str] = None
    title: Optional[str] = None
    title_is_enough: bool = False
    description: Optional[str] = None

    def to_entry(self) -> ChangeEntry:
        return ChangeEntry(
            section=self.section or "",
            project=self.name,
            title=self.title,
            title_is_enough=self.title_is_enough,
            description=self.description,
        )


@dataclass
class MultiProjectEntry:
    """Metadata block given as a sequence of per-project overrides."""
    projects: List[ProjectOverride]


ParsedMetadata = Union[SkipEntry, ChangeEntry, MultiProjectEntry]


class ChangeType(enum.Enum):
    """How a change is rendered inside its section."""
    TITLE_ONLY = "title-only"
    TITLED = "titled"


@dataclass
class Changes:
    """
    Rendered changes collected for one section.

    Title-only changes are always emitted before the titled ones, each group
    keeping the order in which the changes were added.
    """
    title_only: List[str] = field(default_factory=list)
    titled: List[str] = field(default_factory=list)

    def add(self, change_type: ChangeType, content: str) -> None:
        if change_type is ChangeType.TITLE_ONLY:
            self.title_only.append(content)
        else:
            self.titled.append(content)

    def is_empty(self) -> bool:
        return not self.title_only and not self.titled

    def __str__(self) -> str:
        return "".join(self.title_only) + "".join(self.titled)


@dataclass
class Section:
    """A configured changelog section (or subsection) and its changes."""
    title: str
    description: str = ""
    subsections: Dict[str, "Section"] = field(default_factory=dict)
    changes: Changes = field(default_factory=Changes)

    def has_changes(self) -> bool:
        if not self.changes.is_empty():
            return True
        return any(not sub.changes.is_empty() for sub in self.subsections.values())


SectionTree = Dict[str, Section]


@dataclass
class ProjectConfig:
    """A project of a multi-project repository."""
    name: str
    dirs: List[str] = field(default_factory=list)


@dataclass
class ProjectsSettings:
    """Multi-project settings from the configuration file."""
    projects: Dict[str, ProjectConfig] = field(default_factory=dict)
    since_commit: Optional[str] = None
    default_project: Optional[str] = None


@dataclass
class Settings:
    """Options set in the configuration file."""
    skip_commits_up_to: Optional[str] = None
    skip_commits: List[str] = field(default_factory=list)
    git_path: Optional[str] = None
    projects_settings: ProjectsSettings = field(default_factory=ProjectsSettings)
