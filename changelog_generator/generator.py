"""
Changelog rendering module.

This module contains the ChangelogRenderer class responsible for turning a
filled-in section tree into the final markdown document.
"""

from typing import List

from .models import Section, SectionTree

DELIMITER = "============================================"


class ChangelogRenderer:
    """
    Compose the changelog markdown string from a section tree.

    Sections are emitted in their configured order and only when they (or
    one of their subsections) hold changes. The whole document is wrapped
    between delimiter lines so it can be located inside a larger file.
    """

    def __init__(self, delimiter: str = DELIMITER) -> None:
        self.delimiter = delimiter

    def generate_markdown(self, sections: SectionTree) -> str:
        """
        Build the markdown-formatted changelog.

        Args:
            sections: Section tree with the changes of this run

        Returns:
            Complete changelog markdown content as a string
        """
        parts: List[str] = [self.delimiter, "\n\n"]

        for section in sections.values():
            if not section.has_changes():
                continue

            self._heading(parts, "##", section)
            parts.append(str(section.changes))

            for subsection in section.subsections.values():
                if subsection.changes.is_empty():
                    continue
                self._heading(parts, "###", subsection)
                parts.append(str(subsection.changes))

        parts.append(self.delimiter)
        return "".join(parts)

    @staticmethod
    def _heading(parts: List[str], level: str, section: Section) -> None:
        parts.append(f"{level} {section.title}\n\n")
        if section.description:
            parts.append(f"{section.description}\n\n")
