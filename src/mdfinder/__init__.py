"""mdfinder - browse and copy markdown snippets from the terminal."""

__version__ = "1.2.0"
