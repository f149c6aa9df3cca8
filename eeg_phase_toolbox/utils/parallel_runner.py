"""
Parallel Runner Utility Module
-----------------------------
Runs independent PLV tasks sequentially or on a thread pool, collecting results in task order.
"""
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Callable, Dict, List, Optional

from .logging_utils import log_progress_bar


class ParallelTaskRunner:
    """
    Runs tasks in parallel using a thread pool.
    - Each task is task_function(config) for one config dict.
    - A failing task is logged and its exception re-raised; no partial result list is returned.
    """
    def __init__(self, task_function: Callable[[Dict[str, Any]], Any], task_configs: List[Dict[str, Any]],
                 logger: Optional[logging.Logger] = None, max_workers: int = 1, thread_name_prefix: str = "PLVWorker"):
        self.task_function = task_function
        self.task_configs = task_configs
        self.max_workers = max_workers
        self.thread_name_prefix = thread_name_prefix
        self.logger = logger if logger else logging.getLogger(__name__)
        self.logger.info(f"ParallelTaskRunner initialized with {len(task_configs)} tasks, {max_workers} workers.")

    def run(self) -> List[Any]:
        """
        Runs all tasks and returns their results in the order of task_configs.
        """
        results: List[Any] = [None] * len(self.task_configs)
        update, close = log_progress_bar(self.logger, len(self.task_configs), desc=self.thread_name_prefix)
        try:
            if self.max_workers <= 1:
                for idx, config in enumerate(self.task_configs):
                    results[idx] = self._run_one(idx, config)
                    update(1)
                return results
            with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix=self.thread_name_prefix) as executor:
                future_to_idx = {executor.submit(self._run_one, idx, config): idx for idx, config in enumerate(self.task_configs)}
                for future in as_completed(future_to_idx):
                    results[future_to_idx[future]] = future.result()
                    update(1)
            return results
        finally:
            close()

    def _run_one(self, idx: int, config: Dict[str, Any]) -> Any:
        try:
            return self.task_function(config)
        except Exception as e:
            self.logger.error(f"ParallelTaskRunner: Task {idx} failed: {e}", exc_info=True)
            raise
