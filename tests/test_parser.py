import pytest

from changelog_generator.errors import SchemaError
from changelog_generator.models import (
    ChangeEntry,
    CommitRecord,
    MultiProjectEntry,
    ProjectOverride,
    SkipEntry,
)
from changelog_generator.parser import CommitParser, MetadataParser


#============================================
# MetadataParser
#============================================

def test_parse_skip_shorthand():
    assert MetadataParser.parse(" skip") == SkipEntry()
    assert MetadataParser.parse("skip\n") == SkipEntry()


def test_parse_skip_key_needs_no_section():
    assert MetadataParser.parse("\n    skip: true") == SkipEntry()


def test_parse_map():
    text = """
        project: mkchlog-action
        section: doc
        title-is-enough: true"""

    assert MetadataParser.parse(text) == ChangeEntry(
        section="doc",
        project="mkchlog-action",
        title_is_enough=True,
    )


def test_parse_map_with_title_and_description():
    text = """
        section: security.vuln_fixes
        title: Fixed vulnerability related to opening files
        description: The application was vulnerable to attacks
                     if the attacker had access to the working
                     directory."""

    entry = MetadataParser.parse(text)
    assert entry.section == "security.vuln_fixes"
    assert entry.title == "Fixed vulnerability related to opening files"
    assert entry.description == (
        "The application was vulnerable to attacks if the attacker had access to the working directory."
    )
    assert entry.title_is_enough is False


def test_parse_map_empty_project_is_none():
    entry = MetadataParser.parse("\n    section: features\n    project: ")
    assert entry == ChangeEntry(section="features", project=None)


def test_parse_inline_map():
    assert MetadataParser.parse(" {section: bug, title-is-enough: true}") == ChangeEntry(
        section="bug", title_is_enough=True,
    )


def test_parse_inherit_key_is_ignored():
    entry = MetadataParser.parse("\n  section: dev\n  inherit: all")
    assert entry == ChangeEntry(section="dev")


def test_parse_unknown_key_fails():
    with pytest.raises(SchemaError) as excinfo:
        MetadataParser.parse("\n    section: features\n    desciption: typo")
    assert str(excinfo.value).startswith("changelog: unknown field `desciption`")


def test_parse_missing_section_fails():
    with pytest.raises(SchemaError) as excinfo:
        MetadataParser.parse("\n    project: mkchlog")
    assert str(excinfo.value).startswith("changelog: missing field `section`")


def test_parse_empty_section_fails():
    with pytest.raises(SchemaError, match="missing field `section`"):
        MetadataParser.parse("\n    section:")


def test_parse_invalid_type_fails():
    with pytest.raises(SchemaError, match="invalid type for field `title-is-enough`"):
        MetadataParser.parse("\n    section: dev\n    title-is-enough: sure")


def test_parse_unexpected_scalar_fails():
    with pytest.raises(SchemaError, match="unexpected value 'nope'"):
        MetadataParser.parse(" nope")


def test_parse_invalid_yaml_fails():
    with pytest.raises(SchemaError):
        MetadataParser.parse("\n    section: [dev")


def test_parse_sequence():
    text = """
        - project:
           name: mkchlog
           section: dev
           title-is-enough: true
        - project:
           name: mkchlog-action
           skip: true"""

    assert MetadataParser.parse(text) == MultiProjectEntry(projects=[
        ProjectOverride(name="mkchlog", section="dev", title_is_enough=True),
        ProjectOverride(name="mkchlog-action", skip=True),
    ])


def test_parse_sequence_requires_name():
    text = """
     - project:
        section: dev"""
    with pytest.raises(SchemaError, match="missing field `name`"):
        MetadataParser.parse(text)


def test_parse_sequence_requires_section_unless_skipped():
    text = """
     - project:
        name: mkchlog
        title: Something"""
    with pytest.raises(SchemaError, match="missing field `section`"):
        MetadataParser.parse(text)


def test_parse_sequence_rejects_other_keys():
    text = """
     - projects:
        name: mkchlog
        section: dev"""
    with pytest.raises(SchemaError, match="unknown field `projects`"):
        MetadataParser.parse(text)


def test_parse_sequence_element_must_be_map():
    with pytest.raises(SchemaError, match="expected a map"):
        MetadataParser.parse("\n - mkchlog\n - mkchlog-action")


def test_parse_commit_wraps_errors_with_raw_text():
    commit = CommitRecord(
        commit_id="abc",
        header="commit abc",
        message="Add things",
        metadata_text="\n    sekcion: features",
        raw="commit abc\n\n    Add things\n\n    changelog:\n    sekcion: features",
    )
    with pytest.raises(SchemaError) as excinfo:
        MetadataParser.parse_commit(commit)

    message = str(excinfo.value)
    assert "unknown field `sekcion`" in message
    assert message.endswith("in changelog message in commit:\n>>> " + commit.raw)


def test_parse_commit_without_block_fails():
    commit = CommitRecord("abc", "commit abc", "Add things", None, "commit abc\n\n    Add things")
    with pytest.raises(SchemaError, match="Missing 'changelog:' key"):
        MetadataParser.parse_commit(commit)


#============================================
# CommitParser
#============================================

def test_commit_parse():
    raw = """commit 7c85bee4303d56bededdfacf8fbb7bdc68e2195b
Author: Cry Wolf <cry.wolf@centrum.cz>
Date:   Tue Jun 13 16:26:35 2023 +0200

    Don't reallocate the buffer when we know its size

    This computes the size and allocates the buffer upfront.
    Avoiding allocations like this introduces 10% speedup.

    changelog:
        section: perf
        title: Improved processing speed by 10%
        title-is-enough: true

"""
    commit = CommitParser.parse(raw)

    assert commit.commit_id == "7c85bee4303d56bededdfacf8fbb7bdc68e2195b"
    assert commit.header == """commit 7c85bee4303d56bededdfacf8fbb7bdc68e2195b
Author: Cry Wolf <cry.wolf@centrum.cz>
Date:   Tue Jun 13 16:26:35 2023 +0200"""
    assert commit.message == """Don't reallocate the buffer when we know its size

    This computes the size and allocates the buffer upfront.
    Avoiding allocations like this introduces 10% speedup."""
    assert MetadataParser.parse(commit.metadata_text) == ChangeEntry(
        section="perf", title="Improved processing speed by 10%", title_is_enough=True,
    )
    assert commit.raw == raw
    assert not commit.is_merge


def test_commit_parse_windows_line_endings():
    raw = (
        "commit 7c85bee4303d56bededdfacf8fbb7bdc68e2195b\r\n"
        "Author: Cry Wolf <cry.wolf@centrum.cz>\r\n"
        "Date:   Tue Jun 13 16:26:35 2023 +0200\r\n\r\n"
        "    Don't reallocate the buffer when we know its size\r\n"
        "    changelog:\r\n"
        "        section: perf\r\n"
        "        title-is-enough: true"
    )
    commit = CommitParser.parse(raw)

    assert commit.message == "Don't reallocate the buffer when we know its size"
    assert MetadataParser.parse(commit.metadata_text) == ChangeEntry(section="perf", title_is_enough=True)


def test_commit_parse_decorated_header():
    raw = "commit 68b0e70191bf (HEAD -> master)\nAuthor: A <a@b.c>\n\n    Title\n\n    changelog: skip"
    assert CommitParser.parse(raw).commit_id == "68b0e70191bf"


def test_commit_parse_missing_changelog_block():
    raw = """commit 7c85bee4303d56bededdfacf8fbb7bdc68e2195b
Author: Cry Wolf <cry.wolf@centrum.cz>
Date:   Tue Jun 13 16:26:35 2023 +0200

    Don't reallocate the buffer when we know its size
"""
    assert CommitParser.parse(raw).metadata_text is None


def test_commit_parse_merge():
    raw = """commit 3a1b2c
Merge: 1111111 2222222
Author: Cry Wolf <cry.wolf@centrum.cz>

    Merge branch 'feature'
"""
    assert CommitParser.parse(raw).is_merge


def test_commit_parse_without_message_fails():
    with pytest.raises(SchemaError, match="Could not extract commit message text"):
        CommitParser.parse("commit 3a1b2c\nAuthor: Cry Wolf <cry.wolf@centrum.cz>")
