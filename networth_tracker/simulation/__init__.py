"""Deterministic synthetic history for the net worth dashboard."""

from networth_tracker.simulation.history import HistorySimulator, generate_history
from networth_tracker.simulation.seeded_random import SeededRandom, seed_for_date

__all__ = [
    "HistorySimulator",
    "SeededRandom",
    "generate_history",
    "seed_for_date",
]
