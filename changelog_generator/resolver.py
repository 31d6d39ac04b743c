"""
Title and description inheritance.

A changelog entry may omit its title and description; they are then taken
from the commit message, whose first paragraph is the title and whose
remaining text is the description.
"""

import re
from typing import Tuple

from .errors import ExtractionError
from .models import ChangeEntry

PARAGRAPH_BREAK_RE = re.compile(r"\n\s*\n")


class TitleDescriptionResolver:
    """Fill in the title and description of an entry from the commit message."""

    @staticmethod
    def resolve(entry: ChangeEntry, message: str) -> Tuple[str, str]:
        """
        Return the ``(title, description)`` pair for an entry.

        An explicit title is used verbatim, otherwise the title is the first
        paragraph of the message. Unless the entry provides its own
        description or says the title is enough, the rest of the message
        becomes the description with the hard wrapping removed.

        Raises:
            ExtractionError: If a title has to be inherited from an empty
                message.
        """
        title = entry.title or ""
        description = entry.description or ""

        parts = PARAGRAPH_BREAK_RE.split(message, maxsplit=1)
        if not title:
            title = parts[0].strip()
            if not title:
                raise ExtractionError("Could not extract 'title' from commit message text")

        if not description and not entry.title_is_enough and len(parts) > 1:
            description = unwrap(parts[1])

        return title, description


def unwrap(text: str) -> str:
    """Join hard-wrapped and indented lines into one line."""
    lines = (line.strip() for line in text.strip().splitlines())
    return " ".join(line for line in lines if line)
