"""Base interface for output reporters.

Reporters render a page model (PackagePage, SearchPage or UserPage) into a
formatted document.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Union

from npm_explorer.models import PackagePage, SearchPage, UserPage

Page = Union[PackagePage, SearchPage, UserPage]


class BaseReporter(ABC):
    """Abstract base class for output reporters."""

    @abstractmethod
    def render(self, page: Page) -> str:
        """Render a page to formatted output.

        Args:
            page: The page model to render.

        Returns:
            Rendered output as a string.
        """
        ...

    def write(self, page: Page, output_path: Path) -> None:
        """Render and write output to a file.

        Args:
            page: The page model to render.
            output_path: Path to write the output file.
        """
        content = self.render(page)
        output_path.write_text(content, encoding="utf-8")

    @property
    @abstractmethod
    def format_name(self) -> str:
        """Return the output format name.

        Returns:
            Format name like "markdown", "html", "json", etc.
        """
        ...

    @property
    @abstractmethod
    def default_extension(self) -> str:
        """Return the default file extension for this format.

        Returns:
            Extension like ".md", ".html", ".json", etc.
        """
        ...
