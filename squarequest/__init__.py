"""
SquareQuest - Timed memory-matching puzzle engine.

Flip tiles in a square grid, find color pairs, and clear as many
rounds as possible before the clock runs out. The package provides:
- Grid generation
- The session state machine (reducer + timed driver)
- Ranked score history
- A terminal front end
"""

__version__ = "0.1.0"
