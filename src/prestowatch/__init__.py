"""
prestowatch: alert on Presto queries that scan too many partitions.

Polls the coordinator for running queries, counts the partitions each
input scans, and posts one Slack alert per offending query.
"""

__version__ = "0.1.0"
APP_NAME = "prestowatch"

__all__ = ["APP_NAME", "__version__"]
