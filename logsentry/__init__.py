"""
Logsentry - A log tailing and keyword alerting daemon.

This package watches a directory tree for growing log files, scans
newly appended lines for configured keywords and sends a rendered
notification for every match.
"""

__version__ = "0.1.0"
