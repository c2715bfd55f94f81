# cli_driver.py
# This file is intended to be run to play or test the game on the CLI

import argparse
import random
from typing import List, Optional

from merge2048.board import Difficulty, Direction, tile_map, to_grid
from merge2048.config import configure_logging, load_config
from merge2048.core import GameState, new_game, play_move, use_power_up
from merge2048.errors import PowerUpError
from merge2048.powerups import PowerUpKind
from merge2048.status import GameProgressState

DIRECTION_KEYS = {'W': Direction.UP, 'A': Direction.LEFT, 'S': Direction.DOWN, 'D': Direction.RIGHT}
POWER_UP_KEYS = {'V': PowerUpKind.DIVIDER, 'X': PowerUpKind.DOUBLER, 'P': PowerUpKind.SWAPPER}

HELP_TEXT = (
    "Moves: W/A/S/D. Power-ups: V r c (divide), X r c (double), "
    "P r c (swap, pick two tiles), U (undo). Q quits."
)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Play 2048 with power-ups in the terminal")
    parser.add_argument("--size", type=int, default=None, help="Board size (4, 5 or 6)")
    parser.add_argument("--difficulty", type=str, default=None, choices=[d.value for d in Difficulty],
                        help="Sets the power-up budgets")
    parser.add_argument("--win-tile", type=int, default=None, help="Tile value that wins the game")
    parser.add_argument("--seed", type=int, default=None, help="Seed for deterministic tile spawns")
    parser.add_argument("--log-level", type=str, default=None, help="Logging level (e.g. DEBUG)")
    return parser.parse_args(argv)


def tile_id_at(state: GameState, row: int, col: int) -> Optional[str]:
    tile = tile_map(state.snapshot).get((row, col))
    return tile.id if tile else None


def handle_command(state: GameState, command: str, rng: random.Random) -> GameState:
    """
    Applies one line of player input and returns the resulting state.
    Rejected moves and power-ups are reported and leave the state unchanged.
    """
    parts = command.upper().split()
    if not parts:
        print(HELP_TEXT)
        return state
    key = parts[0]

    if key in DIRECTION_KEYS:
        next_state, moved = play_move(state, DIRECTION_KEYS[key], rng)
        if not moved:
            print("Move did not change the board. Try a different direction.")
        return next_state

    if key == 'U':
        kind, target = PowerUpKind.UNDO, None
    elif key in POWER_UP_KEYS:
        if len(parts) != 3 or not parts[1].isdigit() or not parts[2].isdigit():
            print(f"Usage: {key} row col")
            return state
        kind = POWER_UP_KEYS[key]
        target = tile_id_at(state, int(parts[1]), int(parts[2]))
    else:
        print("Invalid input. " + HELP_TEXT)
        return state

    try:
        next_state, won = use_power_up(state, kind, target)
    except PowerUpError as e:
        print(f"{e.kind}: {e}")
        return state
    if kind == PowerUpKind.SWAPPER and next_state.powerups.selected_tile_id:
        print("Tile selected. Pick a second tile to swap with.")
    if won:
        print("The doubler made a winning tile!")
    return next_state


def main(argv: Optional[List[str]] = None):
    args = parse_args(argv)
    config = load_config(
        grid_size=args.size,
        difficulty=args.difficulty,
        win_tile=args.win_tile,
        log_level=args.log_level,
    )
    configure_logging(config.log_level)
    rng = random.Random(args.seed)

    # 1. Initialize game
    state = new_game(config, rng)
    print(HELP_TEXT)
    display_board_state(state)

    # 2. Game Loop
    while state.progress != GameProgressState.GAME_OVER:
        command = input("Enter command: ").strip()
        if command.upper() == 'Q':
            print("Quitting game.")
            break
        state = handle_command(state, command, rng)
        display_board_state(state)

    # 3. Game Ended
    print("\n--- Final Board State ---")
    display_board_state(state)
    if state.won:
        print(f"Congratulations! You reached the {config.win_tile} tile!")
    if state.progress == GameProgressState.GAME_OVER:
        print("No more moves or power-ups. Better luck next time!")


# --- Display Function ---
def display_board_state(state: GameState):
    """Prints the board, score, power-ups and game status to the console."""
    snapshot = state.snapshot
    powerups = state.powerups
    print(f"\nScore: {snapshot.score}")
    status_message = {
        GameProgressState.IN_PROGRESS: "Status: IN_PROGRESS",
        GameProgressState.GAME_WON: "YOU WON! (keep playing)",
        GameProgressState.GAME_OVER: "GAME OVER!"
    }
    print(status_message[state.progress])
    print(f"Divider {powerups.divider} | Doubler {powerups.doubler} | "
          f"Swapper {powerups.swapper} | Undo {powerups.undo}")

    for row in to_grid(snapshot):
        print("\t".join(str(value) if value else "." for value in row))
    print("-" * (snapshot.grid_size * 6))


if __name__ == "__main__":
    main()
