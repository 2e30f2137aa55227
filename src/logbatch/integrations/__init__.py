from .logging_handler import LogBatchHandler

__all__ = ["LogBatchHandler"]
