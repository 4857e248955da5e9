"""
Fish Miner
==========

A timed arcade catching game: a hook sweeps above falling items and the player
drops a line to catch them, racing a countdown towards a target score.

- catch_core: the deterministic game simulation (clock, items, hook, catches,
  scoring, lifecycle) plus its Gymnasium wrapper
- highscores: the score store used once a game has ended
- evaluation: seeded headless runs of scripted agents

All tunable parameters are in game_config.yaml.
"""
