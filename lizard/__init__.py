"""Lizard Q-Learning - a lizard learns to find the five crickets on a 3x3 grid.

This package implements tabular Q-learning with epsilon-greedy exploration for the
DeepLizard grid game, with a greedy playback of the learned policy.
"""

__version__ = "1.0.0"
__author__ = "Lizard Q-Learning Demo"
