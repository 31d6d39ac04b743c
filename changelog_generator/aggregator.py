"""
Section aggregation.

Files rendered changes into the configured section tree.
"""

import logging

from .errors import AttributionError
from .models import ChangeEntry, ChangeType, SectionTree

logger = logging.getLogger("changelog-generator.aggregator")

SUBSECTION_SEPARATOR = "."


class SectionAggregator:
    """
    Append changes to the sections of a section tree.

    The tree is mutated in place; its keys never change, only the change
    buckets grow.
    """

    def __init__(self, sections: SectionTree) -> None:
        self.sections = sections

    def add(self, entry: ChangeEntry, title: str, description: str, raw: str) -> ChangeType:
        """
        Render one change and file it under ``entry.section``.

        Returns:
            The classification the change was filed with.

        Raises:
            AttributionError: If the section or subsection is not configured.
        """
        section_key, _, subsection_key = entry.section.partition(SUBSECTION_SEPARATOR)
        section_key = section_key.strip()
        subsection_key = subsection_key.strip()

        section = self.sections.get(section_key)
        if section is None:
            raise AttributionError(f"Unknown section '{section_key}'", raw)

        target = section
        if subsection_key:
            target = section.subsections.get(subsection_key)
            if target is None:
                raise AttributionError(
                    f"Unknown subsection '{subsection_key}' of section '{section_key}'", raw
                )

        change_type, change = render_change(title, description, entry.title_is_enough, bool(subsection_key))
        target.changes.add(change_type, change)
        logger.debug("Added %s change '%s' to section '%s'", change_type.value, title, entry.section)
        return change_type


def render_change(title: str, description: str, title_is_enough: bool, in_subsection: bool):
    """Return the classification and the markdown fragment of one change."""
    if title_is_enough or not description:
        return ChangeType.TITLE_ONLY, f"* {title}\n\n"

    heading = "####" if in_subsection else "###"
    return ChangeType.TITLED, f"{heading} {title}\n\n{description}\n\n"
