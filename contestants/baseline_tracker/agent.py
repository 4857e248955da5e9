"""
Baseline Tracker Agent - Drops the line when a fish will be in reach.

This is a simple heuristic agent that follows each falling item across
frames to estimate how fast items fall, then predicts where they will be
when a catch line dropped now reaches the bottom.

This serves as:
1. A working example of how to read observations and return actions
2. A baseline benchmark for teams to compare against

Strategy:
- Remember the first height and step each item uid was seen at
- Estimate the fall speed (pixels per step) from those tracks
- Forget every track when a new episode starts (uids restart at 1)
- Project every live item forward by the catch travel time
- Drop the line only when the first item projected into the catch
  window is a fish
"""

from typing import Any, Dict, Optional, Tuple

import numpy as np


ACTION_WAIT = 0
ACTION_CATCH = 1

# Index of "fish" in obj_kind (order of the items list in game_config.yaml)
FISH_KIND = 0

# GameState.ENDED in the "state" observation
STATE_ENDED = 2

# Catch travel time in steps (500ms extend at 16ms per step)
DEFAULT_LEAD_STEPS = 31


class FishMinerAgent:
    """
    Baseline agent that only catches fish.

    Garbage and mystery items are never targeted, and a drop is skipped if
    one of them would be picked up before the fish.
    """

    def __init__(self, lead_steps: int = DEFAULT_LEAD_STEPS, debug: bool = False):
        """
        Initialize the agent.

        Args:
            lead_steps: Steps between requesting a catch and it resolving.
            debug: If True, print decisions to stdout.
        """
        self.debug = debug
        self.lead_steps = lead_steps
        self.reset()

    def reset(self, seed: Optional[int] = None) -> None:
        """
        Reset agent state for a new episode.

        Args:
            seed: Unused, the agent is deterministic.
        """
        self._step = 0
        self._tracks: Dict[int, Tuple[int, float]] = {}
        self._max_uid = 0
        self._last_time_left: Optional[int] = None
        self._last_state: Optional[int] = None

    def _is_new_episode(
        self,
        observation: Dict[str, Any],
        uids: np.ndarray,
        ys: np.ndarray
    ) -> bool:
        """
        Detect an episode boundary the harness did not tell us about.

        Item uids restart at 1 every episode, so old tracks must not be
        matched against new items.
        """
        state = int(observation["state"])
        time_left = int(observation["time_left"])
        if self._last_state == STATE_ENDED and state != STATE_ENDED:
            return True
        if self._last_time_left is not None and time_left > self._last_time_left:
            return True
        for uid, y in zip(uids, ys):
            uid = int(uid)
            if uid in self._tracks:
                # Items only fall; one that moved up is a new item reusing the uid
                if float(y) < self._tracks[uid][1]:
                    return True
            elif uid <= self._max_uid:
                # Uids only grow within an episode
                return True
        return False

    def _fall_speed(self, uids: np.ndarray, ys: np.ndarray) -> float:
        """Mean observed fall in pixels per step, 0 until anything has moved."""
        speeds = []
        for uid, y in zip(uids, ys):
            first_step, first_y = self._tracks[int(uid)]
            if self._step > first_step and y > first_y:
                speeds.append((y - first_y) / (self._step - first_step))
        return float(np.mean(speeds)) if speeds else 0.0

    def act(self, observation: Dict[str, Any], debug: bool = False) -> int:
        """
        Decide whether to drop the catch line this step.

        Args:
            observation: Dict of numpy arrays from the environment.
            debug: If True, print debug info for this step.

        Returns:
            1 to request a catch, 0 to wait.
        """
        mask = observation["obj_mask"].astype(bool)
        uids = observation["obj_uid"][mask]
        kinds = observation["obj_kind"][mask]
        xs = observation["obj_x"][mask]
        ys = observation["obj_y"][mask]

        if self._is_new_episode(observation, uids, ys):
            self.reset()
        self._last_time_left = int(observation["time_left"])
        self._last_state = int(observation["state"])
        self._step += 1

        live = set(int(uid) for uid in uids)
        self._tracks = {uid: track for uid, track in self._tracks.items() if uid in live}
        for uid, y in zip(uids, ys):
            self._tracks.setdefault(int(uid), (self._step, float(y)))
        if live:
            self._max_uid = max(self._max_uid, max(live))

        if int(observation["catch_phase"]) != 0 or len(uids) == 0:
            return ACTION_WAIT

        hook_x = float(observation["hook_x"])
        depth = float(observation["catch_depth"])
        tol_x = float(observation["catch_tolerance_x"])
        tol_y = float(observation["catch_tolerance_y"])

        predicted_y = ys + self._fall_speed(uids, ys) * self.lead_steps
        # Keep a small margin inside the window for the discrete fall steps
        in_reach = (np.abs(xs - hook_x) < tol_x - 1.0) & (np.abs(predicted_y - depth) < tol_y - 10.0)
        if not in_reach.any():
            return ACTION_WAIT

        # The first item in the window (oldest first) is the one that gets caught
        first = int(np.argmax(in_reach))
        action = ACTION_CATCH if int(kinds[first]) == FISH_KIND else ACTION_WAIT

        if debug or self.debug:
            print(f"[Tracker Agent] hook_x={hook_x:.0f}, "
                  f"target uid={int(uids[first])} kind={int(kinds[first])} "
                  f"y={float(ys[first]):.0f}->{float(predicted_y[first]):.0f}, "
                  f"action={action}")

        return action


# Convenience function to create agent (used by evaluation harness)
def create_agent(**kwargs) -> FishMinerAgent:
    """Factory function to create an agent instance."""
    return FishMinerAgent(**kwargs)
