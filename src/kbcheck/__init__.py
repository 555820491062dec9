"""kbcheck: front-matter, link, and graph validation for Markdown document sets."""

__version__ = "0.3.0"
