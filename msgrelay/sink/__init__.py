"""
Result sink module.
"""

from msgrelay.sink.file import FileResultSink, ResultSink, read_records

__all__ = ["ResultSink", "FileResultSink", "read_records"]
