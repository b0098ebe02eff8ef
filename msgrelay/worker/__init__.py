"""
Worker module.
Contains the consumer loop and the processing step.
"""

from msgrelay.worker.main import Worker, run
from msgrelay.worker.processing import process_message

__all__ = ["Worker", "run", "process_message"]
