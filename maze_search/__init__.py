"""
Heuristic search toolkit for the grid maze collection game.

This package implements action-based searches (greedy, beam, chokudai) and
local searches (hill climbing, simulated annealing) over small grid states
where one or more characters collect point values.
"""
