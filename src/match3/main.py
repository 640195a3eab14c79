"""Entry point for the headless match-three round runner.

Sets up the world, event bus and systems, plays rounds with the random
auto-player at simulation speed and prints the daily leaderboard.
"""
import argparse
import logging
import random
from dataclasses import replace
from typing import List, Optional

from match3.components.board import Snapshot
from match3.components.round_state import RoundStatus
from match3.config import GameConfig
from match3.constants import EMPTY, TOKEN_NAMES
from match3.events.bus import (
    EventBus,
    EVENT_LEADERBOARD_UPDATED,
    EVENT_ROUND_END_REQUEST,
    EVENT_ROUND_START_REQUEST,
    EVENT_TICK,
)
from match3.services.scoring import ScoringService
from match3.systems.auto_player_system import AutoPlayerSystem
from match3.systems.board import BoardSystem
from match3.systems.pacing import PacingSystem
from match3.systems.round_system import RoundSystem
from match3.systems.score_system import ScoreSystem
from match3.systems.state_utils import get_or_create_round_state, get_round_score
from match3.world import create_world


class MatchThreeGame:
    """One player's board plus the systems that drive a timed round."""

    def __init__(
        self,
        scoring: ScoringService,
        config: Optional[GameConfig] = None,
        *,
        uid: Optional[str] = None,
        nickname: Optional[str] = None,
        auto_player: bool = False,
        move_delay: float = 0.0,
        paced: bool = False,
        seed: Optional[int] = None,
    ):
        self.config = config or scoring.config
        self.scoring = scoring
        self.event_bus = EventBus()
        player = scoring.create_session(uid, nickname)
        self.world = create_world(
            self.event_bus,
            self.config,
            uid=player.uid,
            nickname=player.nickname,
            auto_player=auto_player,
            move_delay=move_delay,
            agent_seed=seed,
            rng=random.Random(seed),
        )
        # Board and score systems
        self.board_system = BoardSystem(self.world, self.event_bus)
        self.score_system = ScoreSystem(self.world, self.event_bus)
        # Presentation pacing is optional; without it the state machine runs at simulation speed.
        self.pacing_system = PacingSystem(self.world, self.event_bus) if paced else None
        # Round control
        self.round_system = RoundSystem(self.world, self.event_bus, scoring)
        self.auto_player_system = (
            AutoPlayerSystem(self.world, self.event_bus) if auto_player else None
        )

    @property
    def score(self) -> int:
        return get_round_score(self.world).points

    @property
    def round_state(self):
        return get_or_create_round_state(self.world)

    def start_round(self) -> None:
        self.event_bus.emit(EVENT_ROUND_START_REQUEST)

    def end_round(self, reason: str = "player") -> None:
        self.event_bus.emit(EVENT_ROUND_END_REQUEST, reason=reason)

    def update(self, delta_time: float) -> None:
        self.event_bus.emit(EVENT_TICK, dt=delta_time)

    def run_round(self, dt: float = 0.05, max_ticks: Optional[int] = None) -> int:
        """Start a round and tick until it finishes; returns the final score."""
        self.start_round()
        if self.round_state.status != RoundStatus.PLAYING:
            return self.score
        limit = max_ticks if max_ticks is not None else int(self.config.round_duration / dt) + 1000
        for _ in range(limit):
            if self.round_state.status == RoundStatus.FINISHED:
                break
            self.update(dt)
        return self.score


def format_board(snapshot: Snapshot) -> str:
    lines: List[str] = []
    for row in snapshot:
        lines.append(" ".join("." if cell == EMPTY else TOKEN_NAMES[cell % len(TOKEN_NAMES)][0] for cell in row))
    return "\n".join(lines)


def print_leader(sender, **payload) -> None:
    board = payload.get("board") or []
    if board:
        leader = board[0]
        print(f"Leaderboard {payload.get('day')} updated: {leader.nickname} leads with {leader.points}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Play simulated match-three rounds against the daily leaderboard.")
    parser.add_argument("--players", type=int, default=3, help="number of simulated players")
    parser.add_argument("--seed", type=int, default=None, help="base seed for boards and moves")
    parser.add_argument("--duration", type=float, default=None, help="round length in seconds")
    parser.add_argument("--dt", type=float, default=0.05, help="simulated seconds per tick")
    parser.add_argument("--move-delay", type=float, default=0.5, help="auto-player thinking time per move")
    parser.add_argument("--paced", action="store_true", help="replay cascade phases with animation delays")
    parser.add_argument("--log-level", default="WARNING", help="logging level (DEBUG, INFO, ...)")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, str(args.log_level).upper(), logging.WARNING),
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    config = GameConfig.from_env()
    if args.duration is not None:
        config = replace(
            config,
            round_duration=args.duration,
            token_ttl=max(config.token_ttl, args.duration + 10),
        )
    leaderboard_bus = EventBus()
    leaderboard_bus.subscribe(EVENT_LEADERBOARD_UPDATED, print_leader)
    scoring = ScoringService(leaderboard_bus, config=config)

    for index in range(args.players):
        seed = None if args.seed is None else args.seed + index
        game = MatchThreeGame(
            scoring,
            config,
            nickname=f"Bot {index + 1}",
            auto_player=True,
            move_delay=args.move_delay,
            paced=args.paced,
            seed=seed,
        )
        score = game.run_round(dt=args.dt)
        print(f"Bot {index + 1}: {score} points")
        print(format_board(game.board_system.board.snapshot()))
        print()

    print(f"Leaderboard {scoring.day_stamp()}:")
    for rank, row in enumerate(scoring.top_today(), start=1):
        print(f"{rank:>3}. {row.nickname:<20} {row.points:>7}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
