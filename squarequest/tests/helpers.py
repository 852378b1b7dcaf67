"""
Shared helpers for picking tiles in tests.
"""

from collections import defaultdict

from ..engine_core.state import SessionState, Tile

# Small margin so simulated timers are safely past due
MARGIN = 0.05


def unmatched_by_color(state: SessionState) -> dict:
    groups = defaultdict(list)
    for tile in state.tiles:
        if not tile.is_matched:
            groups[tile.color].append(tile)
    return groups


def find_matching_pair(state: SessionState) -> tuple[Tile, Tile]:
    for tiles in unmatched_by_color(state).values():
        if len(tiles) >= 2:
            return tiles[0], tiles[1]
    raise AssertionError("No matching pair left")


def find_mismatched_pair(state: SessionState) -> tuple[Tile, Tile]:
    groups = [tiles for tiles in unmatched_by_color(state).values()]
    if len(groups) < 2:
        raise AssertionError("Need two colors to mismatch")
    return groups[0][0], groups[1][0]


def match_pair(session, scheduler, config) -> tuple[Tile, Tile]:
    """Select a matching pair and let it resolve."""
    first, second = find_matching_pair(session.state)
    session.select_tile(first.tile_id)
    session.select_tile(second.tile_id)
    scheduler.advance(config.reveal_delay + config.match_confirm_delay + MARGIN)
    return first, second


def clear_round(session, scheduler, config) -> None:
    """Match every pair in the current grid and show the round prompt."""
    while session.state.matched_count < session.state.max_matchable:
        match_pair(session, scheduler, config)
    scheduler.advance(config.round_complete_delay + MARGIN)
