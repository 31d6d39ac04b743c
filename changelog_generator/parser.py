"""
Commit parsing module.

This module splits raw commit text into header, message and changelog
metadata, and turns the metadata block (YAML) into one of the structured
entry types from :mod:`changelog_generator.models`.
"""

import logging
import re
import textwrap
from typing import Any, Dict, List, Optional

import yaml

from .errors import ChangelogError, SchemaError
from .models import (
    ChangeEntry,
    CommitRecord,
    MultiProjectEntry,
    ParsedMetadata,
    ProjectOverride,
    SkipEntry,
)

logger = logging.getLogger("changelog-generator.parser")

SKIP_SHORTHAND = "skip"

# keys accepted in a single-map block; `inherit` is ignored, it is only
# written by the commit message template
ENTRY_KEYS = ("skip", "project", "section", "title", "title-is-enough", "description", "inherit")
PROJECT_KEYS = ("skip", "name", "section", "title", "title-is-enough", "description", "inherit")


class CommitParser:
    """
    Split the raw text of one commit (as printed by ``git log``) into a
    :class:`CommitRecord`.
    """

    CHANGELOG_RE = re.compile(r"^[ \t]*changelog:", re.M)

    @staticmethod
    def parse(raw: str) -> CommitRecord:
        """
        Parse one commit.

        Returns:
            CommitRecord with ``metadata_text`` set to None when the commit
            has no changelog block.

        Raises:
            SchemaError: If the commit message text cannot be located.
        """
        data = raw.replace("\r", "")
        parts = CommitParser.CHANGELOG_RE.split(data, maxsplit=1)

        if "\n\n" not in parts[0]:
            raise SchemaError("Could not extract commit message text", raw)
        header, message = parts[0].split("\n\n", 1)

        metadata_text = None
        if len(parts) > 1 and parts[1].strip():
            metadata_text = parts[1].rstrip()

        # "commit <sha> (HEAD -> master)"
        first_line = header.split("\n", 1)[0]
        commit_id = ""
        if first_line.startswith("commit "):
            commit_id = first_line[len("commit "):].split(" (", 1)[0].strip()

        return CommitRecord(
            commit_id=commit_id,
            header=header,
            message=message.strip(),
            metadata_text=metadata_text,
            raw=raw,
        )


class MetadataParser:
    """
    Parse a changelog metadata block.

    The block is one of three shapes:

    * the scalar ``skip``;
    * a map with ``section`` and optional ``project``, ``title``,
      ``title-is-enough`` and ``description``;
    * a sequence of ``project:`` maps, one per affected project.

    Unknown keys are rejected so that typos do not silently drop data.
    """

    @staticmethod
    def parse(text: str) -> ParsedMetadata:
        """
        Parse the metadata text that follows the ``changelog:`` marker.

        Raises:
            SchemaError: If the block is not one of the accepted shapes.
        """
        if text.strip() == SKIP_SHORTHAND:
            return SkipEntry()

        try:
            value = yaml.safe_load(_dedent(text))
        except yaml.YAMLError as e:
            raise SchemaError(f"changelog: {e}") from e

        if isinstance(value, dict):
            return MetadataParser._parse_map(value)
        if isinstance(value, list):
            return MetadataParser._parse_sequence(value)
        if value is None:
            raise SchemaError("changelog: empty changelog message")
        raise SchemaError(f"changelog: unexpected value '{text.strip()}'")

    @staticmethod
    def parse_commit(commit: CommitRecord) -> ParsedMetadata:
        """Parse the metadata block of a commit; errors point at the commit."""
        if commit.metadata_text is None:
            raise SchemaError("Missing 'changelog:' key", commit.raw)
        logger.debug("Parsing changelog block of commit %s", commit.commit_id)
        try:
            return MetadataParser.parse(commit.metadata_text)
        except ChangelogError as e:
            raise e.with_commit(commit.raw) from e

    @staticmethod
    def _parse_map(value: Dict[Any, Any]) -> ParsedMetadata:
        _check_keys(value, ENTRY_KEYS, "changelog")
        skip = _get_bool(value, "skip", "changelog")
        if skip:
            return SkipEntry()

        section = _get_str(value, "section", "changelog")
        if section is None:
            raise SchemaError("changelog: missing field `section`")

        return ChangeEntry(
            section=section,
            project=_get_str(value, "project", "changelog"),
            title=_get_str(value, "title", "changelog"),
            title_is_enough=_get_bool(value, "title-is-enough", "changelog"),
            description=_get_str(value, "description", "changelog"),
        )

    @staticmethod
    def _parse_sequence(value: List[Any]) -> MultiProjectEntry:
        projects: List[ProjectOverride] = []
        for index, item in enumerate(value):
            where = f"changelog[{index}]"
            if not isinstance(item, dict):
                raise SchemaError(f"{where}: expected a map with a `project` key")
            _check_keys(item, ("project",), where)
            if "project" not in item:
                raise SchemaError(f"{where}: missing field `project`")

            project = item["project"]
            where = f"{where}.project"
            if not isinstance(project, dict):
                raise SchemaError(f"{where}: expected a map")
            _check_keys(project, PROJECT_KEYS, where)

            name = _get_str(project, "name", where)
            if name is None:
                raise SchemaError(f"{where}: missing field `name`")

            skip = _get_bool(project, "skip", where)
            section = _get_str(project, "section", where)
            if section is None and not skip:
                raise SchemaError(f"{where}: missing field `section`")

            projects.append(ProjectOverride(
                name=name,
                skip=skip,
                section=section,
                title=_get_str(project, "title", where),
                title_is_enough=_get_bool(project, "title-is-enough", where),
                description=_get_str(project, "description", where),
            ))

        if not projects:
            raise SchemaError("changelog: empty list of projects")
        return MultiProjectEntry(projects=projects)


def _dedent(text: str) -> str:
    # the block usually starts on the line after the marker and keeps the
    # indentation git adds to commit messages
    lines = text.split("\n")
    while lines and not lines[0].strip():
        lines.pop(0)
    return textwrap.dedent("\n".join(lines))


def _check_keys(value: Dict[Any, Any], allowed, where: str) -> None:
    for key in value:
        if key not in allowed:
            expected = ", ".join(f"`{k}`" for k in allowed)
            raise SchemaError(f"{where}: unknown field `{key}`, expected one of {expected}")


def _get_str(value: Dict[Any, Any], key: str, where: str) -> Optional[str]:
    item = value.get(key)
    if item is None:
        return None
    if not isinstance(item, str):
        raise SchemaError(f"{where}: invalid type for field `{key}`, expected a string")
    return item


def _get_bool(value: Dict[Any, Any], key: str, where: str) -> bool:
    item = value.get(key, False)
    if item is None:
        return False
    if not isinstance(item, bool):
        raise SchemaError(f"{where}: invalid type for field `{key}`, expected a boolean")
    return item
