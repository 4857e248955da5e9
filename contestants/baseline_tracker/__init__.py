"""
Baseline Tracker Agent Package

A simple heuristic agent that drops the catch line when a fish is about to
be in reach. Serves as a benchmark and example.
"""

from .agent import FishMinerAgent, create_agent

__all__ = ["FishMinerAgent", "create_agent"]
