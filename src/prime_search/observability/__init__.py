from .logging import JsonlLogSink, LogMessage, NullLogSink, StdoutLogSink

__all__ = ["JsonlLogSink", "LogMessage", "NullLogSink", "StdoutLogSink"]
