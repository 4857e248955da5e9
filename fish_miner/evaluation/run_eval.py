"""
Evaluation Harness
==================

Plays a catching agent through every game in the seed bank and reports how it
scored. Agents are loaded from a directory holding ``agent.py`` or from the
file itself.

Usage:
    python -m fish_miner.evaluation.run_eval --agent contestants/baseline_tracker
"""

from __future__ import annotations

import argparse
import importlib.util
import json
import logging
import sys
import time
from dataclasses import asdict, dataclass
from pathlib import Path
from types import ModuleType
from typing import Any, Callable, Dict, List, Optional

import numpy as np

from fish_miner.catch_core.config_loader import GameConfig
from fish_miner.catch_core.env_gym import FishMinerEnv
from fish_miner.catch_core.rules import TARGET_REACHED
from fish_miner.highscores.store import (
    JsonFileScoreStore,
    ScoreStore,
    ScoreStoreError,
    submit_final_score,
)

logger = logging.getLogger(__name__)

SEED_BANK_PATH = Path(__file__).with_name("seed_bank.json")

AgentFn = Callable[[Dict[str, Any]], int]


@dataclass
class EvalResult:
    """Outcome of one game."""
    seed: int
    final_score: int
    catches: int
    time_left: int
    termination_reason: str
    elapsed_time: float
    steps: int
    catch_steps: Optional[List[int]] = None


@dataclass
class EvalSummary:
    """Score statistics over a batch of games."""
    mean_score: float
    std_score: float
    min_score: int
    max_score: int
    median_score: float
    target_reached: int
    total_time: float
    results: List[EvalResult]

    @classmethod
    def from_results(cls, results: List[EvalResult], total_time: float) -> "EvalSummary":
        scores = np.array([r.final_score for r in results])
        return cls(
            mean_score=float(scores.mean()),
            std_score=float(scores.std()),
            min_score=int(scores.min()),
            max_score=int(scores.max()),
            median_score=float(np.median(scores)),
            target_reached=sum(r.termination_reason == TARGET_REACHED for r in results),
            total_time=total_time,
            results=results,
        )


def load_seed_bank(path: Optional[str] = None) -> List[int]:
    """Read the ``seeds`` list from a seed bank file, the bundled one by default."""
    bank = json.loads(Path(path or SEED_BANK_PATH).read_text())
    return [int(seed) for seed in bank["seeds"]]


def _import_agent_module(agent_file: Path) -> ModuleType:
    module_spec = importlib.util.spec_from_file_location("agent_module", agent_file)
    if module_spec is None or module_spec.loader is None:
        raise ImportError(f"Cannot import {agent_file}")
    module = importlib.util.module_from_spec(module_spec)
    sys.modules["agent_module"] = module
    module_spec.loader.exec_module(module)
    return module


def load_agent(agent_path: str) -> AgentFn:
    """
    Import a contestant and return the callable that picks actions.

    A module exposing ``FishMinerAgent`` is instantiated once and its bound
    ``act`` is returned; otherwise a module-level ``act`` is used as is.

    Args:
        agent_path: A contestant directory or the path of its agent.py.

    Raises:
        FileNotFoundError: Nothing exists at the resolved path.
        ImportError: The file could not be imported as a module.
        AttributeError: The module has neither entry point.
    """
    agent_file = Path(agent_path)
    if agent_file.is_dir():
        agent_file = agent_file / "agent.py"
    if not agent_file.exists():
        raise FileNotFoundError(f"Agent file not found: {agent_file}")

    module = _import_agent_module(agent_file)

    agent_cls = getattr(module, "FishMinerAgent", None)
    if agent_cls is not None:
        act = getattr(agent_cls(), "act", None)
        if act is None:
            raise AttributeError(f"{agent_file}: FishMinerAgent has no act() method")
        return act

    act = getattr(module, "act", None)
    if act is None:
        raise AttributeError(f"{agent_file}: define a FishMinerAgent class or an act(obs) function")
    return act


def _play(env: FishMinerEnv, agent_fn: AgentFn, seed: int, catch_steps: Optional[List[int]] = None):
    """Run one episode to its end; returns the final info dict and the step count."""
    obs, info = env.reset(seed=seed)
    steps = 0
    done = False
    while not done:
        obs, _, terminated, truncated, info = env.step(agent_fn(obs))
        if catch_steps is not None and info["catch_started"]:
            catch_steps.append(steps)
        steps += 1
        done = terminated or truncated
    return info, steps


def evaluate_single_seed(
    agent_fn: AgentFn,
    seed: int,
    config: Optional[GameConfig] = None,
    record_catches: bool = False,
    verbose: bool = False
) -> EvalResult:
    """
    Play one game with ``agent_fn`` choosing every action.

    Args:
        agent_fn: Maps an observation dict to 0 (wait) or 1 (catch).
        seed: Seed for the item spawner.
        config: Game configuration, the bundled one if None.
        record_catches: Keep the step index of every catch the agent started.
        verbose: Print a line with the outcome.
    """
    env = FishMinerEnv(config=config)
    catch_steps: Optional[List[int]] = [] if record_catches else None
    started = time.perf_counter()
    try:
        info, steps = _play(env, agent_fn, seed, catch_steps)
    finally:
        env.close()

    result = EvalResult(
        seed=seed,
        final_score=info["score"],
        catches=info["catches"],
        time_left=info["time_left"],
        termination_reason=info["terminated_reason"],
        elapsed_time=time.perf_counter() - started,
        steps=steps,
        catch_steps=catch_steps,
    )
    if verbose:
        print(f"  seed {seed:>6}  score {result.final_score:>5}  catches {result.catches:>3}  "
              f"{result.termination_reason} ({result.elapsed_time:.2f}s)")
    return result


def print_summary(summary: EvalSummary) -> None:
    games = len(summary.results)
    rows = [
        ("Games", f"{games}"),
        ("Mean score", f"{summary.mean_score:.2f} ± {summary.std_score:.2f}"),
        ("Median score", f"{summary.median_score:.2f}"),
        ("Score range", f"{summary.min_score} .. {summary.max_score}"),
        ("Target reached", f"{summary.target_reached}/{games}"),
        ("Wall time", f"{summary.total_time:.2f}s"),
    ]
    print()
    print("-" * 40)
    for label, value in rows:
        print(f"{label + ':':<16}{value}")
    print("-" * 40)


def evaluate_agent(
    agent_fn: AgentFn,
    seeds: Optional[List[int]] = None,
    config: Optional[GameConfig] = None,
    record_catches: bool = False,
    verbose: bool = True
) -> EvalSummary:
    """
    Play one game per seed and summarize the final scores.

    Args:
        agent_fn: Maps an observation dict to 0 (wait) or 1 (catch).
        seeds: Seeds to play, the bundled seed bank if None.
        config: Game configuration, the bundled one if None.
        record_catches: Passed through to every game.
        verbose: Print each game and the summary table.

    Raises:
        ValueError: ``seeds`` is empty.
    """
    if seeds is None:
        seeds = load_seed_bank()
    if not seeds:
        raise ValueError("No seeds to evaluate")

    started = time.perf_counter()
    results = []
    for n, seed in enumerate(seeds, start=1):
        if verbose:
            print(f"Game {n} of {len(seeds)}")
        results.append(evaluate_single_seed(
            agent_fn, seed, config=config, record_catches=record_catches, verbose=verbose
        ))

    summary = EvalSummary.from_results(results, time.perf_counter() - started)
    if verbose:
        print_summary(summary)
    return summary


def save_results(summary: EvalSummary, agent_name: str, output_path: str) -> None:
    """Write the summary and per-game results as JSON; catch steps are left out."""
    report = asdict(summary)
    for game in report["results"]:
        game.pop("catch_steps")
    report = {"agent": agent_name, "timestamp": time.strftime("%Y-%m-%d %H:%M:%S"), **report}

    Path(output_path).write_text(json.dumps(report, indent=2))
    print(f"Results written to {output_path}")


def save_best_score(
    agent_fn: AgentFn,
    summary: EvalSummary,
    store: ScoreStore,
    player_name: Optional[str] = None,
    config: Optional[GameConfig] = None
) -> str:
    """
    Replay the best seed and submit its final score to a score store.

    Args:
        agent_fn: The agent that produced ``summary``.
        summary: Evaluation summary to pick the best seed from.
        store: Where to save the score.
        player_name: Display name for the record.
        config: Game configuration. Uses default if None.

    Returns:
        The new record's id.
    """
    best = max(summary.results, key=lambda r: r.final_score)
    env = FishMinerEnv(config=config)
    try:
        _play(env, agent_fn, best.seed)
        if env.game.score != best.final_score:
            logger.warning(
                f"Replay of seed {best.seed} scored {env.game.score}, "
                f"evaluation scored {best.final_score}"
            )
        return submit_final_score(env.game, store, player_name)
    finally:
        env.close()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Score a Fish Miner agent over the seed bank")
    parser.add_argument("--agent", required=True,
                        help="contestant directory, or its agent.py")
    parser.add_argument("--seeds", default=None,
                        help="seed bank JSON to play instead of the bundled one")
    parser.add_argument("--output", default=None,
                        help="write the results to this JSON file")
    parser.add_argument("--scores", default=None,
                        help="high score file that receives the best game")
    parser.add_argument("--record", action="store_true",
                        help="keep the step index of every catch")
    parser.add_argument("--quiet", action="store_true",
                        help="only print errors")
    parser.add_argument("--log-level", default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="threshold for engine log messages")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S"
    )

    try:
        agent_fn = load_agent(args.agent)
    except (FileNotFoundError, ImportError, AttributeError) as e:
        print(f"Could not load agent: {e}")
        return 1

    seeds = load_seed_bank(args.seeds) if args.seeds else None
    summary = evaluate_agent(agent_fn, seeds=seeds, record_catches=args.record, verbose=not args.quiet)

    agent_name = Path(args.agent).name
    if args.output:
        save_results(summary, agent_name, args.output)
    if args.scores:
        try:
            record_id = save_best_score(
                agent_fn, summary, JsonFileScoreStore(args.scores), player_name=agent_name
            )
        except ScoreStoreError as e:
            print(f"Could not save high score: {e}")
            return 1
        print(f"Best game saved to {args.scores} as {record_id}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
