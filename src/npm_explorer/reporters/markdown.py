"""Markdown reporter for explorer pages.

This module provides a reporter that renders package, search and
maintainer pages to Markdown using Jinja2 templates.
"""

from datetime import UTC, datetime
from functools import partial
from importlib.resources import files
from pathlib import Path
from typing import Optional

from jinja2 import Environment, FileSystemLoader, Template

from npm_explorer.formatting import (
    format_downloads,
    format_file_size,
    format_relative_time,
    get_github_url,
    install_commands,
)
from npm_explorer.reporters.base import BaseReporter, Page


class MarkdownReporter(BaseReporter):
    """Reporter that generates Markdown documents from page models.

    Each page type has a bundled template (``package.md.j2``,
    ``search.md.j2``, ``user.md.j2``). A custom template replaces all of
    them and receives the same context: ``page``, ``generated_at``, a
    ``relative_time`` function and the filters ``downloads``, ``filesize``
    and ``github_url``.

    Attributes:
        custom_template: Template used for every page, if one was given.
    """

    def __init__(
        self,
        template_path: Optional[Path] = None,
        now: Optional[datetime] = None,
    ) -> None:
        """Initialize the Markdown reporter.

        Args:
            template_path: Optional path to a custom Jinja2 template.
                If not provided, uses the bundled template for each page.
            now: Reference time for relative dates. Defaults to the time
                of rendering.
        """
        self.now = now
        if template_path:
            # Load custom template from file
            self.env = self._create_environment(FileSystemLoader(template_path.parent))
            self.custom_template: Optional[Template] = self.env.get_template(
                template_path.name
            )
        else:
            self.env = self._create_environment()
            self.custom_template = None

    def _create_environment(self, loader=None) -> Environment:
        env = Environment(loader=loader, autoescape=False, trim_blocks=True, lstrip_blocks=True)
        env.filters["downloads"] = format_downloads
        env.filters["filesize"] = format_file_size
        env.filters["github_url"] = get_github_url
        env.globals["install_commands"] = install_commands
        return env

    def _load_default_template(self, name: str) -> Template:
        """Load a bundled Jinja2 template.

        Args:
            name: Template file name inside ``npm_explorer.templates``.

        Returns:
            The template loaded from package resources.
        """
        template_content = (
            files("npm_explorer.templates").joinpath(name).read_text(encoding="utf-8")
        )
        return self.env.from_string(template_content)

    def render(self, page: Page) -> str:
        """Render a page to Markdown.

        Args:
            page: PackagePage, SearchPage or UserPage.

        Returns:
            Rendered Markdown document as a string.
        """
        now = self.now or datetime.now(UTC)
        template = self.custom_template or self._load_default_template(page.template_name)
        return template.render(
            page=page,
            generated_at=now,
            relative_time=partial(format_relative_time, now=now),
        )

    @property
    def format_name(self) -> str:
        """Return the output format name.

        Returns:
            The string "markdown".
        """
        return "markdown"

    @property
    def default_extension(self) -> str:
        """Return the default file extension for Markdown files.

        Returns:
            The string ".md".
        """
        return ".md"
