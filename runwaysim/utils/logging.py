import logging
import sys
from typing import Optional, TextIO


LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
DATE_FORMAT = "%H:%M:%S"


def get_logger(name: str, level: Optional[int] = None, stream: Optional[TextIO] = None) -> logging.Logger:
	"""Return a logger writing to stdout (or ``stream``) with one handler at most.

	``level`` overrides the INFO default on every call; the handler itself
	passes everything so the logger level is the only filter.
	"""
	logger = logging.getLogger(name)
	if not logger.handlers:
		handler = logging.StreamHandler(stream=stream if stream is not None else sys.stdout)
		handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
		logger.addHandler(handler)
		logger.setLevel(logging.INFO)
	if level is not None:
		logger.setLevel(level)
	logger.propagate = False
	return logger


def frame_message(frame: int, message: str) -> str:
	"""Prefix a message with the zero-padded frame it happened on."""
	return f"[Frame #{frame:04d}] {message}"
