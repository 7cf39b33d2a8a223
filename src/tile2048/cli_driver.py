# cli_driver.py
# Play the 2048 game on the terminal against the stateless core.

import argparse
import logging
import random
import sys
from typing import List, Optional

from tile2048.core import (
    DIRECTION,
    GameProgressState,
    new_game,
    play_move,
)

logger = logging.getLogger(__name__)

KEY_TO_DIRECTION = {'W': DIRECTION.UP, 'A': DIRECTION.LEFT, 'S': DIRECTION.DOWN, 'D': DIRECTION.RIGHT}


def setup_logging(level: str = "WARNING"):
    """Configures root logging for a terminal session."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format='%(asctime)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler(sys.stderr)]
    )


def parse_args(args=None):
    parser = argparse.ArgumentParser(description="Play 2048 in the terminal")
    parser.add_argument("--seed", type=int, default=None,
                        help="Seed for the tile spawner (default: unseeded)")
    parser.add_argument("--log-level", type=str, default="WARNING",
                        help="Logging level (default: WARNING)")
    return parser.parse_args(args)


def main(argv: Optional[List[str]] = None):
    args = parse_args(argv)
    setup_logging(args.log_level)
    rng = random.Random(args.seed) if args.seed is not None else None

    # 1. Initialize game
    state = new_game(rng)
    display_board_state(state.board, state.score, state.progress)

    # 2. Game Loop
    while state.progress == GameProgressState.IN_PROGRESS:
        move_input = input("Enter move (W/A/S/D for Up/Left/Down/Right, Q to quit): ").strip().upper()

        if move_input == 'Q':
            print("Quitting game.")
            break

        chosen_direction = KEY_TO_DIRECTION.get(move_input)
        if not chosen_direction:
            print("Invalid input. Use W, A, S, D.")
            continue

        # 3. Move, spawn and re-evaluate in one step
        state, move_was_made = play_move(state, chosen_direction, rng)
        if not move_was_made:
            print("Move did not change the board. Try a different direction.")
            continue

        display_board_state(state.board, state.score, state.progress)

    # 4. Game Ended
    print("\n--- Final Board State ---")
    display_board_state(state.board, state.score, state.progress)
    if state.progress == GameProgressState.GAME_OVER:
        print("No more moves possible. Better luck next time!")
    return state


# --- Display Function ---
def display_board_state(board: List[List[int]], score: int, progress: GameProgressState):
    """Prints the board, score, and game status to the console."""
    print(f"\nScore: {score}")
    if progress == GameProgressState.GAME_OVER:
        print("GAME OVER!")
    else:
        print(f"Status: {progress.name}")

    for row in board:
        print("\t".join(map(str, row)))
    print("-" * (len(board) * 6))


if __name__ == "__main__":
    main()
