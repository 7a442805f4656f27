"""Hot-list and news feed aggregation into static JSON snapshots."""

__version__ = "0.1.0"
