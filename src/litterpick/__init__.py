"""LitterPick core: report lifecycle, community verification and scoring."""

__version__ = "0.1.0"
