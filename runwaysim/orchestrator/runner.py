from __future__ import annotations

import time
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass
from typing import Dict, List

import pandas as pd

from runwaysim.config import Config
from runwaysim.orchestrator.sim import TrialResult, run_trial
from runwaysim.utils.logging import get_logger


logger = get_logger(__name__)

RESULT_COLUMNS = ["trial_number", "control", "crash_count", "landed_count", "spawned_count", "preemptions"]


@dataclass
class CrashTally:
	controls: int
	tests: int
	results: pd.DataFrame
	latency_seconds: float = 0.0

	@classmethod
	def from_results(cls, results: List[TrialResult], latency_seconds: float = 0.0) -> "CrashTally":
		rows = sorted((r.to_dict() for r in results), key=lambda row: row["trial_number"])
		df = pd.DataFrame(rows, columns=RESULT_COLUMNS)
		controls = int(df.loc[df["control"], "crash_count"].sum())
		tests = int(df.loc[~df["control"], "crash_count"].sum())
		return cls(controls=controls, tests=tests, results=df, latency_seconds=latency_seconds)

	def summary(self) -> pd.DataFrame:
		df = self.results.assign(group=self.results["control"].map({True: "control", False: "test"}))
		return (
			df.groupby("group")
			.agg(
				trials=("trial_number", "count"),
				crashes=("crash_count", "sum"),
				mean_crashes=("crash_count", "mean"),
				preemptions=("preemptions", "sum"),
			)
			.reindex(["control", "test"])
		)

	def as_dict(self) -> Dict[str, int]:
		return {"controls": self.controls, "tests": self.tests}


class TrialRunner:
	def __init__(self, config: Config) -> None:
		self.config = config.validate()

	def run(self) -> CrashTally:
		start = time.time()
		n = self.config.num_trials
		logger.info(
			"Running %d trials | frames=%d runways=%d spawn_p=%.3f workers=%d",
			n,
			self.config.frame_horizon,
			self.config.num_runways,
			self.config.spawn_probability,
			self.config.workers,
		)
		trial_numbers = range(1, n + 1)
		if self.config.workers > 1:
			with ProcessPoolExecutor(max_workers=self.config.workers) as executor:
				results = list(executor.map(run_trial, [self.config] * n, trial_numbers))
		else:
			results = []
			step = max(1, n // 10)
			for trial_number in trial_numbers:
				results.append(run_trial(self.config, trial_number))
				if trial_number % step == 0:
					logger.info("Completed %d/%d trials", trial_number, n)

		tally = CrashTally.from_results(results, latency_seconds=time.time() - start)
		logger.info("Crash tally: controls=%d tests=%d | latency=%.2fs", tally.controls, tally.tests, tally.latency_seconds)
		return tally
