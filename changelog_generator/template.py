"""
Configuration (template) module.

This module reads the YAML configuration file that declares the changelog
sections and the projects of a multi-project repository, and generates the
commit message template offered to developers by a git hook.
"""

import copy
import logging
from pathlib import PurePosixPath
from typing import Any, Dict, Iterable, List, Optional

import yaml

from .errors import ConfigError
from .models import ProjectConfig, ProjectsSettings, Section, SectionTree, Settings

logger = logging.getLogger("changelog-generator.template")

DEFAULT_CONFIG_FILE = ".changelog.yml"


class ChangelogTemplate:
    """
    Parsed configuration file.

    Holds the pristine section tree and the settings. Every run gets its own
    copy of the tree from :meth:`build_sections`.
    """

    def __init__(self, sections: SectionTree, settings: Settings) -> None:
        self._sections = sections
        self.settings = settings

    @classmethod
    def from_file(cls, path: str) -> "ChangelogTemplate":
        """
        Load the configuration from a file.

        Raises:
            ConfigError: If the file cannot be read or is invalid.
        """
        try:
            with open(path, encoding="utf-8") as f:
                content = f.read()
        except OSError as e:
            raise ConfigError(f"Error reading config YAML file '{path}': {e}") from e

        logger.debug("Loaded configuration file %s", path)
        return cls.from_str(content)

    @classmethod
    def from_str(cls, content: str) -> "ChangelogTemplate":
        """
        Parse the configuration from a YAML string.

        Raises:
            ConfigError: If the configuration is invalid.
        """
        try:
            config = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigError(f"Error parsing config YAML file: {e}") from e

        if not isinstance(config, dict):
            raise ConfigError("Missing 'sections' key in config file")

        settings = Settings(
            skip_commits_up_to=_optional_str(config, "skip-commits-up-to"),
            skip_commits=_parse_skip_commits(config.get("skip-commits")),
            git_path=_optional_str(config, "git-path"),
            projects_settings=_parse_projects(config.get("projects")),
        )
        sections = _parse_sections(config)
        return cls(sections, settings)

    @property
    def project_names(self) -> List[str]:
        return list(self.settings.projects_settings.projects)

    def build_sections(self) -> SectionTree:
        """Return a fresh section tree with empty change buckets."""
        return copy.deepcopy(self._sections)

    def generate_commit_template(self, changed_files: Iterable[str]) -> str:
        """
        Generate a commit message template for the given changed files.

        The project(s) of the commit are derived from the directories of the
        changed files when the repository has projects configured.

        Raises:
            ConfigError: If a file does not belong to any configured project.
        """
        projects: List[str] = []
        if self.settings.projects_settings.projects:
            for line in changed_files:
                line = line.strip()
                if not line:
                    continue
                name = self._project_for_file(line)
                if name is None:
                    raise ConfigError(
                        f"Could not determine project for file: '{line}'. "
                        "Is the directory correctly set in the config file?"
                    )
                if name not in projects:
                    projects.append(name)

        lines = ["", "", "changelog:"]
        if len(projects) == 1:
            lines.append(f"  project: {projects[0]}")
            lines.append("  section:")
            lines.append("  inherit: all")
        elif projects:
            for name in projects:
                lines.append(" - project:")
                lines.append(f"    name: {name}")
                lines.append("    section:")
                lines.append("    inherit: all")
        else:
            lines.append("  section:")
            lines.append("  inherit: all")

        lines.append("#")
        lines.append("# Valid changelog sections:")
        lines.append("#")

        keys = []
        for key, section in self._sections.items():
            if section.subsections:
                for sub_key, subsection in section.subsections.items():
                    keys.append((f"{key}.{sub_key}", subsection.title))
            else:
                keys.append((key, section.title))

        width = max((len(key) for key, _ in keys), default=0) + 2
        for key, title in keys:
            lines.append(f"# * {key.ljust(width)}{title}")

        return "\n".join(lines)

    def _project_for_file(self, file_name: str) -> Optional[str]:
        path = PurePosixPath(file_name)
        for name, project in self.settings.projects_settings.projects.items():
            for directory in project.dirs:
                if directory == ".":
                    if path.parent == PurePosixPath("."):
                        return name
                elif PurePosixPath(directory) in path.parents:
                    return name
        return None


def _optional_str(config: Dict[Any, Any], key: str) -> Optional[str]:
    value = config.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigError(f"'{key}' key in config file must be a string")
    return value


def _parse_skip_commits(value: Any) -> List[str]:
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(v, str) and v for v in value):
        raise ConfigError("'skip-commits' key in config file must be a list of commit IDs")
    return value


def _parse_projects(value: Any) -> ProjectsSettings:
    if value is None:
        return ProjectsSettings()
    if not isinstance(value, dict):
        raise ConfigError("Malformed 'projects' key in config file")

    project_list = value.get("list")
    if project_list is None:
        raise ConfigError("Missing 'list' key in config file")
    if not isinstance(project_list, list):
        raise ConfigError("'list' in 'projects' in config file must be an array (list of projects)")

    projects: Dict[str, ProjectConfig] = {}
    for item in project_list:
        project = item.get("project") if isinstance(item, dict) else None
        if not isinstance(project, dict) or not isinstance(project.get("name"), str):
            raise ConfigError(f"Malformed list of projects in config file: {item!r}")
        dirs = project.get("dirs") or []
        if not isinstance(dirs, list):
            raise ConfigError(f"Malformed list of projects in config file: 'dirs' of '{project['name']}' must be a list")
        projects[project["name"]] = ProjectConfig(name=project["name"], dirs=[str(d) for d in dirs])

    since_commit = _optional_str(value, "since-commit")
    default_project = _optional_str(value, "default")

    if since_commit is not None and default_project is None:
        raise ConfigError("Default project name is not set config file")
    if default_project is not None and default_project not in projects:
        raise ConfigError("Default project name is not contained in project names list")

    return ProjectsSettings(
        projects=projects,
        since_commit=since_commit,
        default_project=default_project,
    )


def _parse_sections(config: Dict[Any, Any]) -> SectionTree:
    if "sections" not in config:
        raise ConfigError("Missing 'sections' key in config file")
    sections = config["sections"]
    if not isinstance(sections, dict):
        raise ConfigError("Malformed 'sections' key in config file")

    tree: SectionTree = {}
    for key, value in sections.items():
        if not isinstance(value, dict):
            raise ConfigError(f"Invalid value in section '{key}' in config file")
        section = _parse_section(str(key), value)

        subsections = value.get("subsections")
        if subsections is not None:
            if not isinstance(subsections, dict):
                raise ConfigError(f"Invalid subsections format in section {key} in config file")
            for sub_key, sub_value in subsections.items():
                if not isinstance(sub_value, dict):
                    raise ConfigError(f"Invalid subsection in section '{key}' in config file")
                section.subsections[str(sub_key)] = _parse_section(str(sub_key), sub_value)

        tree[str(key)] = section
    return tree


def _parse_section(key: str, value: Dict[Any, Any]) -> Section:
    if "title" not in value:
        raise ConfigError(f"Missing 'title' in section '{key}' in config file")
    title = value["title"]
    if not isinstance(title, str):
        raise ConfigError(f"Invalid 'title' in section '{key}' in config file")

    description = value.get("description")
    if not isinstance(description, str):
        description = ""
    return Section(title=title, description=description)
