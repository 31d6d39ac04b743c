#!/usr/bin/env python3
"""
Main driver script for the changelog generator.

This script provides the command-line interface and coordinates all modules
to check commit messages or to generate a changelog from the commit history.

Usage (example):
    python -m changelog_generator.main gen
    python -m changelog_generator.main --project mkchlog --file-path .changelog.yml gen
    git log -1 --format=%B | python -m changelog_generator.main --from-stdin check
"""

import argparse
import logging
import os
import sys
from typing import List, Optional

from .changelog import Changelog
from .errors import ChangelogError, ConfigError
from .fetcher import Git, GitHubSource, GitLogCommand, LogSource, StdinSource
from .models import Command
from .template import DEFAULT_CONFIG_FILE, ChangelogTemplate

logger = logging.getLogger("changelog-generator")

COMMIT_TEMPLATE = "commit-template"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="changelog-generator",
        description="Generate a user-facing changelog from changelog blocks in commit messages.",
    )
    parser.add_argument("--project", "-p", help="Project of a multi-project repository to build the changelog for")
    parser.add_argument("--commit", "-c", help="Skip this commit and all older ones (default: check all commits)")
    parser.add_argument("--file-path", "-f", default=DEFAULT_CONFIG_FILE, help="Path to the YAML config file")
    parser.add_argument("--git-path", "-g", help="Path to the git repository (default: ./)")
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--from-stdin", action="store_true", help="Read commit(s) from standard input")
    source.add_argument("--github", metavar="OWNER/REPO", help="Read commits from a GitHub repository")
    parser.add_argument("--token", "-t", default=os.environ.get("GITHUB_TOKEN"), help="GitHub token (default: $GITHUB_TOKEN)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser(Command.CHECK.value, help="Verify the structure of commit messages")
    commands.add_parser(Command.GENERATE.value, help="Process the history and output the changelog in markdown format")
    commands.add_parser(COMMIT_TEMPLATE, help="Print a commit message template for the changed files read from stdin")
    return parser


def make_source(args: argparse.Namespace, template: ChangelogTemplate) -> LogSource:
    """Pick the commit source; command line options win over the config file."""
    commit_id = args.commit or template.settings.skip_commits_up_to

    if args.from_stdin:
        return StdinSource(sys.stdin)

    if args.github:
        owner, sep, repo_name = args.github.partition("/")
        if not sep or not owner or not repo_name:
            raise ConfigError(f"Invalid GitHub repository '{args.github}', expected OWNER/REPO")
        return GitHubSource(owner, repo_name, token=args.token, commit_id=commit_id)

    git_path = args.git_path or template.settings.git_path or "./"
    return GitLogCommand(git_path, commit_id)


def main(argv: Optional[List[str]] = None) -> None:
    """
    Main entry point for the changelog generator.

    Parses command line arguments, loads the configuration and runs the
    requested command, printing its output to stdout.
    """
    args = build_parser().parse_args(argv)

    # Set up logging
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    try:
        template = ChangelogTemplate.from_file(args.file_path)

        if args.command == COMMIT_TEMPLATE:
            print(template.generate_commit_template(sys.stdin))
            return

        command = Command(args.command)
        logger.info("Running '%s' with config %s", command.value, args.file_path)

        git = Git(make_source(args, template))
        output = Changelog(template, git).generate(args.project, command)

        if command is Command.GENERATE:
            print(output)
        else:
            logger.info("All commits are valid")

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        print("\nOperation cancelled by user", file=sys.stderr)
        sys.exit(1)
    except ChangelogError as e:
        logger.error("Changelog generation failed: %s", e.message)
        print(e, file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
