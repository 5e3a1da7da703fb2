"""
Worker for directory comparison.
"""

from __future__ import annotations

import logging
from typing import Optional

from PyQt6.QtCore import QObject

from diverge.core.models import ComparisonResult
from diverge.services.compare_service import CompareService
from diverge.workers.base_worker import BaseWorker


class CompareWorker(BaseWorker):
    """
    Runs a compare service off the UI thread.

    The result arrives through `signals.finished`; a service failure
    arrives through `signals.error` with the service's message.
    """

    def __init__(
        self,
        service: CompareService,
        left_dir: str,
        right_dir: str,
        parent: Optional[QObject] = None
    ):
        super().__init__(parent=parent)
        self.service = service
        self.left_dir = left_dir
        self.right_dir = right_dir

    def do_work(self) -> ComparisonResult:
        logging.debug(f"CompareWorker - Comparing {self.left_dir} <> {self.right_dir}")
        result = self.service.compare_directories(self.left_dir, self.right_dir)
        logging.debug(f"CompareWorker - {result.summary}")
        return result
