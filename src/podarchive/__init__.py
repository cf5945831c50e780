"""PodArchive - archive podcast feeds into tagged audio files."""

__version__ = "0.1.0"
