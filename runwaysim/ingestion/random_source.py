from __future__ import annotations

from typing import Union

import numpy as np

from runwaysim.config import Config


SeedLike = Union[int, np.random.SeedSequence]


class RandomSource:
	"""Draws for airplane arrivals and their initial fuel."""

	def __init__(self, generator: np.random.Generator) -> None:
		self.generator = generator

	@classmethod
	def from_seed(cls, seed: SeedLike) -> "RandomSource":
		return cls(np.random.default_rng(seed))

	def should_spawn(self, probability: float) -> bool:
		return bool(self.generator.random() < probability)

	def initial_fuel(self, low: int, high: int) -> int:
		return int(self.generator.integers(low, high, endpoint=True))


def trial_seed(config: Config, trial_number: int) -> np.random.SeedSequence:
	# Paired trials (1, 2), (3, 4), ... replay the same arrivals under both policies
	stream = (trial_number - 1) // 2 if config.paired_trials else trial_number
	return np.random.SeedSequence([config.seed, stream])
