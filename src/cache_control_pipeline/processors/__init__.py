"""Concurrent processing: worker pool and the pipeline driving it."""

from .worker_pool import WorkerPool, cp_worker
from .pipeline import CopyPipeline, log_configuration, log_final_statistics

__all__ = [
    "WorkerPool",
    "cp_worker",
    "CopyPipeline",
    "log_configuration",
    "log_final_statistics",
]
