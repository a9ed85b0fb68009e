"""Convert Office documents, spreadsheets, web pages and images to Markdown."""

__version__ = "0.1.0"