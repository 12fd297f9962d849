from dataclasses import dataclass


class ConfigError(ValueError):
	"""Raised when a simulation is configured with values it cannot run."""


@dataclass
class Config:
	# Experiment sizes
	num_trials: int = 1000
	frame_horizon: int = 10000
	num_runways: int = 1
	seed: int = 42
	workers: int = 1

	# Arrivals: one Bernoulli draw per frame
	spawn_probability: float = 0.01
	min_fuel: int = 100  # liters, inclusive
	max_fuel: int = 999  # liters, inclusive

	# Fuel model (liters / frame) and approach
	fuel_rate: int = 1
	approach_altitude: int = 80  # also the fuel cost of a full landing

	# Reprioritization policy
	enable_reprioritization: bool = True
	reprioritization_margin: int = 1  # liters a halted lander keeps in reserve
	paired_trials: bool = False  # control/test pairs share arrivals

	@property
	def preemption_reserve(self) -> int:
		return self.approach_altitude + self.reprioritization_margin

	def validate(self) -> "Config":
		if self.num_runways <= 0:
			raise ConfigError(f"num_runways must be positive, got {self.num_runways}")
		if not 0.0 <= self.spawn_probability <= 1.0:
			raise ConfigError(f"spawn_probability must be within [0, 1], got {self.spawn_probability}")
		if self.frame_horizon < 0:
			raise ConfigError(f"frame_horizon must not be negative, got {self.frame_horizon}")
		if self.num_trials <= 0:
			raise ConfigError(f"num_trials must be positive, got {self.num_trials}")
		if self.min_fuel <= 0 or self.min_fuel > self.max_fuel:
			raise ConfigError(f"invalid fuel range [{self.min_fuel}, {self.max_fuel}]")
		if self.fuel_rate <= 0:
			raise ConfigError(f"fuel_rate must be positive, got {self.fuel_rate}")
		if self.approach_altitude <= 0:
			raise ConfigError(f"approach_altitude must be positive, got {self.approach_altitude}")
		if self.reprioritization_margin < 0:
			raise ConfigError(f"reprioritization_margin must not be negative, got {self.reprioritization_margin}")
		if self.workers <= 0:
			raise ConfigError(f"workers must be positive, got {self.workers}")
		return self
