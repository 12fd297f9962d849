import json
import logging
from typing import Tuple

import click

from runwaysim.config import Config, ConfigError
from runwaysim.agents.core import EventBus, FrameLogSubscriber, PLANE_EVENTS
from runwaysim.orchestrator.runner import TrialRunner
from runwaysim.orchestrator.sim import Simulation
from runwaysim.utils.logging import get_logger


@click.group()
def main() -> None:
	"""Runway reprioritization experiment CLI."""
	pass


@main.command()
@click.option("--trials", type=int, default=1000, show_default=True)
@click.option("--frames", type=int, default=10000, show_default=True)
@click.option("--runways", type=int, default=1, show_default=True)
@click.option("--spawn-probability", type=float, default=0.01, show_default=True)
@click.option("--seed", type=int, default=42, show_default=True)
@click.option("--workers", type=int, default=1, show_default=True)
@click.option("--paired/--independent", default=False, show_default=True, help="Share arrivals between each control/test pair.")
@click.option("--no-reprioritization", is_flag=True, default=False, help="Disable preemption in the test group too.")
def run(trials: int, frames: int, runways: int, spawn_probability: float, seed: int, workers: int, paired: bool, no_reprioritization: bool) -> None:
	"""Run control and test trials and print the crash tally."""
	cfg = Config(
		num_trials=trials,
		frame_horizon=frames,
		num_runways=runways,
		spawn_probability=spawn_probability,
		seed=seed,
		workers=workers,
		paired_trials=paired,
		enable_reprioritization=not no_reprioritization,
	)
	try:
		tally = TrialRunner(cfg).run()
	except ConfigError as exc:
		raise click.ClickException(str(exc))
	summary = tally.summary()
	result = {
		**tally.as_dict(),
		"trials": trials,
		"mean_crashes": {
			group: float(summary.loc[group, "mean_crashes"])
			for group in summary.index
			if summary.loc[group, "trials"] > 0
		},
		"preemptions": int(tally.results["preemptions"].sum()),
		"latency_seconds": round(tally.latency_seconds, 3),
	}
	click.echo(json.dumps(result, indent=2))


@main.command()
@click.option("--frames", type=int, default=10000, show_default=True)
@click.option("--runways", type=int, default=1, show_default=True)
@click.option("--spawn-probability", type=float, default=0.01, show_default=True)
@click.option("--seed", type=int, default=42, show_default=True)
@click.option("--control/--test", default=False, show_default=True)
@click.option("--verbose", is_flag=True, default=False, help="Log plane events.")
@click.option("--event", "events", multiple=True, type=click.Choice(PLANE_EVENTS), help="Only log these event types (repeatable).")
def simulate(frames: int, runways: int, spawn_probability: float, seed: int, control: bool, verbose: bool, events: Tuple[str, ...]) -> None:
	"""Run a single trial and print its result."""
	cfg = Config(frame_horizon=frames, num_runways=runways, spawn_probability=spawn_probability, seed=seed)
	bus = EventBus(keep_log=False)
	if verbose:
		FrameLogSubscriber(get_logger("runwaysim.frames", level=logging.DEBUG)).attach(bus, events)
	try:
		sim = Simulation(cfg, control=control, bus=bus)
	except ConfigError as exc:
		raise click.ClickException(str(exc))
	click.echo(json.dumps(sim.run().to_dict(), indent=2))
