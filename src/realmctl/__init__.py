"""realmctl — browser and client for hierarchical realm chambers."""

__version__ = "0.1.0"
