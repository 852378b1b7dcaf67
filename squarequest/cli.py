"""
SquareQuest CLI - Command-line interface for the game.

Usage:
    squarequest play [--difficulty easy] [--shuffle]   Play in the terminal
    squarequest scores [--difficulty easy]             Show the scoreboard
    squarequest clear-scores                           Delete all scores
"""

import argparse
import asyncio
import logging
import os
import sys
import threading

from .engine_core.config import GameConfig
from .engine_core.state import Difficulty, SessionPhase, SessionState
from .session import AsyncioScheduler, GameSession
from .store import JsonScoreStore

PLAY_HELP = """\
Commands:
  <number>     flip that tile
  s            shuffle unmatched tiles (shuffle mode)
  n            next round (after a round is complete)
  r            restart the session
  d <level>    change difficulty (easy, medium, hard)
  q            end the session
  h            show this help"""


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="SquareQuest - timed memory-matching puzzle",
        prog="squarequest",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument(
        "--scores",
        default=os.getenv("SQUAREQUEST_SCORES_PATH"),
        help="Score file (default ~/.squarequest/scores.json)",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    difficulties = [d.value for d in Difficulty]

    # Play command
    play_parser = subparsers.add_parser("play", help="Play a session in the terminal")
    play_parser.add_argument("--difficulty", "-d", choices=difficulties, default="easy")
    play_parser.add_argument("--shuffle", action="store_true", help="Enable shuffle mode")
    play_parser.add_argument("--name", default="Player", help="Name on the scoreboard")

    # Scores command
    scores_parser = subparsers.add_parser("scores", help="Show the scoreboard")
    scores_parser.add_argument("--difficulty", "-d", choices=difficulties)
    scores_parser.add_argument("--limit", type=int, default=10)

    # Clear command
    subparsers.add_parser("clear-scores", help="Delete all saved scores")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "play":
        cmd_play(args)
    elif args.command == "scores":
        cmd_scores(args)
    elif args.command == "clear-scores":
        cmd_clear_scores(args)
    else:
        parser.print_help()
        sys.exit(1)


# =============================================================================
# Rendering
# =============================================================================

def render_tile(state: SessionState, index: int) -> str:
    """Four-character cell: number when hidden, color when shown."""
    tile = state.tiles[index]
    if not tile.is_face_up:
        return f" {index + 1:>2} "
    label = tile.color.value[:3]
    if tile.is_matched:
        return f" {label.lower()}"
    if tile.is_selected:
        return f"*{label.upper()}"
    return f" {label.upper()}"


def render_status(state: SessionState) -> str:
    parts = [
        f"Round {state.round_number}",
        f"Score {state.score}",
        f"Time {state.formatted_time}" + (" !" if state.is_time_low else ""),
        f"Moves {state.total_moves}",
    ]
    if state.shuffle_mode:
        parts.append(f"Shuffles {state.shuffles_remaining}")
    return "  ".join(parts)


def render_board(state: SessionState) -> str:
    """Text grid for the terminal."""
    lines = [render_status(state)]
    size = state.grid_size
    for row in range(size):
        cells = [render_tile(state, row * size + col) for col in range(size)]
        lines.append("|".join(cells))
    if state.mismatch_flash_active:
        lines.append("No match!")
    return "\n".join(lines)


def render_summary(state: SessionState) -> str:
    return (
        f"Session complete! Final score: {state.score}  "
        f"Rounds: {state.rounds_completed}  Moves: {state.total_moves}"
    )


class BoardPrinter:
    """
    Subscriber that prints the board when something visible changes.

    Countdown ticks alone do not reprint the board.
    """

    def __init__(self, config: GameConfig, out=None):
        self.config = config
        self.out = out or sys.stdout
        self._last_key = None

    def __call__(self, state: SessionState) -> None:
        key = (state.session_id, state.phase, state.tiles, state.mismatch_flash_active)
        if key == self._last_key:
            return
        self._last_key = key

        print(render_board(state), file=self.out)
        if state.phase == SessionPhase.ROUND_COMPLETE:
            bonus = self.config.round_bonus(state.round_number)
            print(
                f"Round {state.round_number} complete! +{bonus} bonus points. "
                "'n' for the next round, 'q' to end the session.",
                file=self.out,
            )
        elif state.is_ended:
            print(render_summary(state), file=self.out)
        self.out.flush()


# =============================================================================
# Commands
# =============================================================================

def handle_command(session: GameSession, text: str, out=None) -> bool:
    """
    Apply one line of player input.

    Returns False when the player wants to stop.
    """
    out = out or sys.stdout
    state = session.state
    command = text.strip().lower()

    if not command:
        if state is not None:
            print(render_status(state), file=out)
        return True

    if command.isdigit():
        index = int(command) - 1
        if state is None or not 0 <= index < len(state.tiles):
            print(f"No tile {command}.", file=out)
            return True
        session.select_tile(state.tiles[index].tile_id)
    elif command == "s":
        session.shuffle_grid()
    elif command == "n":
        session.start_new_round()
    elif command == "r":
        session.restart_session()
    elif command.startswith("d"):
        level = command[1:].strip()
        try:
            session.change_difficulty(Difficulty(level))
        except ValueError:
            print("Usage: d easy|medium|hard", file=out)
    elif command == "q":
        session.end_session()
        return False
    elif command in {"h", "?"}:
        print(PLAY_HELP, file=out)
    else:
        print("Unknown command. Type 'h' for help.", file=out)
    return True


def cmd_play(args):
    """Play a session in the terminal."""
    asyncio.run(_play(args))


async def _play(args):
    loop = asyncio.get_running_loop()
    config = GameConfig.from_env()
    session = GameSession(
        store=JsonScoreStore(args.scores),
        config=config,
        scheduler=AsyncioScheduler(loop),
        player_name=args.name,
    )
    session.subscribe(BoardPrinter(config))

    lines: asyncio.Queue = asyncio.Queue()
    threading.Thread(target=_read_stdin, args=(loop, lines), daemon=True).start()

    print(PLAY_HELP)
    session.start_session(Difficulty(args.difficulty), shuffle_mode=args.shuffle)
    await play_loop(session, lines)


def _read_stdin(loop: asyncio.AbstractEventLoop, lines: asyncio.Queue) -> None:
    """Forward stdin lines to the event loop; None marks end of input."""
    try:
        for line in sys.stdin:
            loop.call_soon_threadsafe(lines.put_nowait, line)
        loop.call_soon_threadsafe(lines.put_nowait, None)
    except RuntimeError:
        # Loop already closed after the session ended
        return


async def play_loop(session: GameSession, lines: asyncio.Queue) -> None:
    """
    Feed input lines to the session until it ends.

    Returns as soon as the session ends, including when the countdown
    runs out while no input is pending.
    """
    ended = asyncio.Event()

    def watch(state: SessionState) -> None:
        if state.is_ended:
            ended.set()

    unsubscribe = session.subscribe(watch)
    if session.state is not None and session.state.is_ended:
        ended.set()

    try:
        while not ended.is_set():
            next_line = asyncio.ensure_future(lines.get())
            stop = asyncio.ensure_future(ended.wait())
            done, pending = await asyncio.wait(
                {next_line, stop}, return_when=asyncio.FIRST_COMPLETED
            )
            for task in pending:
                task.cancel()
            if stop in done:
                break

            line = next_line.result()
            if line is None:
                session.end_session()
                break
            if not handle_command(session, line):
                break
    finally:
        unsubscribe()


def cmd_scores(args):
    """Show the scoreboard."""
    store = JsonScoreStore(args.scores)
    if args.difficulty:
        records = store.top_n(Difficulty(args.difficulty), args.limit)
    else:
        records = store.all()[:args.limit]

    if not records:
        print("No scores yet. Play some games to see scores here!")
        return

    for rank, record in enumerate(records, start=1):
        mode = " shuffle" if record.shuffle_mode else ""
        print(
            f"{rank:>3}. {record.score:>5}  {record.difficulty.label:<6} "
            f"{record.formatted_time:>5}  rounds {record.matched_pairs}  "
            f"moves {record.total_moves}  {record.player_name}{mode}  "
            f"{record.timestamp:%Y-%m-%d %H:%M}"
        )


def cmd_clear_scores(args):
    """Delete all saved scores."""
    store = JsonScoreStore(args.scores)
    store.clear()
    print("Scores cleared.")


if __name__ == "__main__":
    main()
