"""Loggers — unified interface for recording tuning runs."""

from tunekit.loggers.interface import LoggerInterface
from tunekit.loggers.local_logger import LocalFileLogger

__all__ = ["LoggerInterface", "LocalFileLogger"]
