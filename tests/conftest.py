from typing import Dict

import pytest


class ScriptedRandomSource:
	"""Spawns planes with preset fuel on preset frames, nothing otherwise."""

	def __init__(self, arrivals: Dict[int, int]) -> None:
		self.arrivals = dict(arrivals)
		self.frame = 0

	def should_spawn(self, probability: float) -> bool:
		self.frame += 1
		return self.frame in self.arrivals

	def initial_fuel(self, low: int, high: int) -> int:
		return self.arrivals[self.frame]


@pytest.fixture
def scripted():
	return ScriptedRandomSource
