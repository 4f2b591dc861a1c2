"""Text extraction gateway backed by Azure AI Document Intelligence."""

__version__ = "1.0.0"
