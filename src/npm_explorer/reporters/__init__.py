"""Output reporters for rendering explorer pages.

This module provides reporters that turn package, search and maintainer
pages into documents (Markdown for now).
"""

from npm_explorer.reporters.base import BaseReporter
from npm_explorer.reporters.markdown import MarkdownReporter

__all__ = ["BaseReporter", "MarkdownReporter"]
