import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional

from tqdm import tqdm

from config import EngineConfig
from kpis import service_time
from registry import get_policy

logger = logging.getLogger(__name__)


class CostEngine:
    """Evaluates candidate batches with one routing policy.

    Policies keep no state between calls, so one engine can be shared by
    any number of threads; every evaluation starts from the batch alone.
    """

    def __init__(self, wh, policy=None, config: Optional[EngineConfig] = None):
        self.wh = wh
        self.config = config or EngineConfig()
        self.policy = get_policy(policy if policy is not None else self.config.policy)

    def route(self, batch):
        return self.policy.build_route(self.wh, batch)

    def evaluate(self, batch) -> float:
        return service_time(self.wh, self.route(batch), self.config.include_turn_time)

    def evaluate_many(self, batches) -> List[float]:
        batches = list(batches)
        logger.debug("evaluating %d batches with %s", len(batches), self.policy.name)
        with ThreadPoolExecutor(max_workers=self.config.max_workers) as executor:
            costs = list(tqdm(
                executor.map(self.evaluate, batches),
                total=len(batches),
                desc=f"Routing ({self.policy.name})",
                disable=not self.config.show_progress,
            ))
        return costs

    def total_cost(self, batches) -> float:
        """Total picking time of a batching solution."""
        return sum(self.evaluate_many(batches))

    def completion_times(self, batches, start_time=0.0) -> List[float]:
        """Completion time of each batch when one picker works them in order."""
        completions = []
        elapsed = start_time
        for cost in self.evaluate_many(batches):
            elapsed += cost
            completions.append(elapsed)
        return completions

    def total_tardiness(self, batches, start_time=0.0) -> float:
        batches = list(batches)
        tardiness = 0.0
        for batch, done in zip(batches, self.completion_times(batches, start_time)):
            tardiness += sum(done - o.due_date for o in batch.orders if o.due_date < done)
        return tardiness

    def max_throughput_time(self, batches, start_time=0.0) -> float:
        """Longest time from a batch's first order arrival to its completion."""
        batches = list(batches)
        completions = self.completion_times(batches, start_time)
        return max(
            (done - b.earliest_arrival_time for b, done in zip(batches, completions)),
            default=0.0,
        )
