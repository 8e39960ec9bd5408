"""Search and audit content in a headless CMS account from the command line."""

__version__ = "0.3.0"
