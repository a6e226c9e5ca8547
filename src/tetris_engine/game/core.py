from __future__ import annotations

import logging
from collections import deque
from enum import Enum, IntEnum
from typing import Any, Deque, Dict, List, Optional, Tuple, Union

from .collision import piece_fits
from .config import GameConfig
from .controller import PieceController
from .errors import CorruptSnapshotError
from .grid import GameGrid
from .pieces import Piece, TetrominoType
from .randomizer import BagRandomizer
from .rules import ClearEvent, ScoreEngine, ScoringRules
from .savestate import decode_session, encode_session, loads
from .state import GameOverReason, GamePhase, Snapshot

logger = logging.getLogger(__name__)


class Command(IntEnum):
    MOVE_LEFT = 0
    MOVE_RIGHT = 1
    ROTATE_CW = 2
    ROTATE_CCW = 3
    SOFT_DROP = 4
    HARD_DROP = 5
    TICK = 6
    RESET = 7
    PAUSE = 8
    RESUME = 9


class CommandResult(Enum):
    APPLIED = "applied"
    REJECTED = "rejected"  # collision; the state is unchanged
    SESSION_ENDED = "session_ended"
    PAUSED = "paused"  # refused while paused; the state is unchanged


PLAYER_COMMANDS = (
    Command.MOVE_LEFT,
    Command.MOVE_RIGHT,
    Command.ROTATE_CW,
    Command.ROTATE_CCW,
    Command.SOFT_DROP,
    Command.HARD_DROP,
)


class TetrisGame:
    """Tick-driven falling-block session.

    Commands and gravity ticks are applied one at a time through ``step``.
    The game owns its board, active piece, next queue and score engine;
    callers observe it only through the snapshots it returns.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        rules: Optional[ScoringRules] = None,
        randomizer: Optional[BagRandomizer] = None,
    ) -> None:
        self.config = config or GameConfig()
        self.rules = rules or ScoringRules()
        self.randomizer = randomizer or BagRandomizer(self.config.random_seed)
        self.grid = GameGrid(self.config.width, self.config.height)
        self.controller = PieceController(self.grid, self.config.wall_kicks)
        self.scores = ScoreEngine(self.config, self.rules)
        self.next_queue: Deque[TetrominoType] = deque()
        self.active: Optional[Piece] = None
        self.phase = GamePhase.SPAWNING
        self.game_over_reason: Optional[GameOverReason] = None
        self.elapsed_ms = 0.0
        self.last_clear: Optional[ClearEvent] = None
        self.paused = False
        self._lock_ticks_left = 0
        self._lock_resets = 0
        self.reset()

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------
    def reset(self, config: Optional[GameConfig] = None) -> None:
        """Start a fresh session, optionally with new tunables.

        A new config whose ``random_seed`` is set reseeds the piece generator.
        """
        if config is not None:
            self._apply_config(config)
            if config.random_seed is not None:
                self.randomizer.reseed(config.random_seed)
        self.grid.reset()
        self.scores.reset()
        self.next_queue.clear()
        self.active = None
        self.game_over_reason = None
        self.elapsed_ms = 0.0
        self.last_clear = None
        self.paused = False
        self._clear_lock_state()
        self._refill_queue()
        logger.debug("session reset (mode=%s, level=%d)", self.config.mode.name, self.level)
        self._spawn()

    def _apply_config(self, config: GameConfig) -> None:
        if (config.width, config.height) != (self.grid.width, self.grid.height):
            self.grid = GameGrid(config.width, config.height)
        self.config = config
        self.controller = PieceController(self.grid, config.wall_kicks)
        self.scores = ScoreEngine(config, self.rules)

    def _clear_lock_state(self) -> None:
        self._lock_ticks_left = 0
        self._lock_resets = 0

    def _refill_queue(self) -> None:
        while len(self.next_queue) < self.config.preview_size:
            self.next_queue.append(self.randomizer.next_kind())

    def _end(self, reason: GameOverReason) -> None:
        self.phase = GamePhase.GAME_OVER
        self.game_over_reason = reason
        self.paused = False
        self._clear_lock_state()
        logger.info(
            "game over (%s): score=%d level=%d lines=%d",
            reason.value,
            self.score,
            self.level,
            self.lines_cleared,
        )

    # ------------------------------------------------------------------
    # Phase transitions
    # ------------------------------------------------------------------
    def _spawn(self) -> None:
        self.phase = GamePhase.SPAWNING
        kind = self.next_queue.popleft()
        self._refill_queue()
        piece = Piece(kind=kind, rotation=0, col=self.config.spawn_col, row=self.config.spawn_row)
        self._clear_lock_state()
        if not piece_fits(self.grid, piece):
            self.active = None
            self._end(GameOverReason.BLOCK_OUT)
            return
        self.active = piece
        self.phase = GamePhase.FALLING
        logger.debug("spawned %s at %s", kind.name, piece.anchor)

    def _enter_locking(self) -> None:
        self.phase = GamePhase.LOCKING
        self._lock_ticks_left = self.config.lock_delay_ticks
        if self._lock_ticks_left <= 0:
            self._lock()

    def _lock(self) -> None:
        assert self.active is not None
        piece = self.active
        cells = piece.cells()
        if any(row < 0 for _, row in cells):
            self._end(GameOverReason.LOCK_OUT)
            return
        self.grid.commit(cells, piece.kind)
        self.active = None
        logger.debug("locked %s at %s", piece.kind.name, piece.anchor)
        self._clear_rows()

    def _clear_rows(self) -> None:
        self.phase = GamePhase.CLEARING
        result = self.grid.clear_full_rows()
        self.last_clear = self.scores.register_clear(result.count, result.rows)
        if result.count:
            logger.debug("cleared rows %s for %d points", list(result.rows), self.last_clear.points)
        target = self.config.line_target
        if target is not None and self.lines_cleared >= target:
            self._end(GameOverReason.TARGET_REACHED)
            return
        self._spawn()

    def _moved(self, piece: Optional[Piece]) -> CommandResult:
        if piece is None:
            return CommandResult.REJECTED
        self.active = piece
        if self.phase == GamePhase.LOCKING and self._lock_resets < self.config.lock_reset_limit:
            self._lock_ticks_left = self.config.lock_delay_ticks
            self._lock_resets += 1
        return CommandResult.APPLIED

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------
    def move_left(self) -> CommandResult:
        return self.apply(Command.MOVE_LEFT)

    def move_right(self) -> CommandResult:
        return self.apply(Command.MOVE_RIGHT)

    def rotate_cw(self) -> CommandResult:
        return self.apply(Command.ROTATE_CW)

    def rotate_ccw(self) -> CommandResult:
        return self.apply(Command.ROTATE_CCW)

    def soft_drop(self) -> CommandResult:
        return self.apply(Command.SOFT_DROP)

    def hard_drop(self) -> CommandResult:
        return self.apply(Command.HARD_DROP)

    def pause(self) -> CommandResult:
        return self.apply(Command.PAUSE)

    def resume(self) -> CommandResult:
        return self.apply(Command.RESUME)

    def tick(self, elapsed_ms: Optional[float] = None) -> CommandResult:
        """Advance one gravity step.

        ``elapsed_ms`` is the logical time that passed since the previous tick
        and defaults to the current fall interval. Paused sessions do not age.
        """
        if self.game_over:
            return CommandResult.SESSION_ENDED
        if self.paused:
            return CommandResult.PAUSED
        self.elapsed_ms += self.fall_interval_ms if elapsed_ms is None else float(elapsed_ms)
        limit = self.config.time_limit_ms
        if limit is not None and self.elapsed_ms >= limit:
            self._end(GameOverReason.TIME_UP)
            return CommandResult.APPLIED
        assert self.active is not None
        if self.controller.can_fall(self.active):
            self.active = self.active.moved(0, 1)
            self.phase = GamePhase.FALLING
        elif self.phase == GamePhase.FALLING:
            self._enter_locking()
        else:
            self._lock_ticks_left -= 1
            if self._lock_ticks_left <= 0:
                self._lock()
        return CommandResult.APPLIED

    def apply(self, command: Union[Command, int]) -> CommandResult:
        command = Command(command)
        if command == Command.RESET:
            self.reset()
            return CommandResult.APPLIED
        if self.game_over:
            return CommandResult.SESSION_ENDED
        if command in (Command.PAUSE, Command.RESUME):
            pausing = command == Command.PAUSE
            if self.paused == pausing:
                return CommandResult.REJECTED
            self.paused = pausing
            logger.debug("session %s", "paused" if pausing else "resumed")
            return CommandResult.APPLIED
        if self.paused:
            return CommandResult.PAUSED
        if command == Command.TICK:
            return self.tick()
        assert self.active is not None
        piece = self.active
        if command == Command.MOVE_LEFT:
            return self._moved(self.controller.move_left(piece))
        if command == Command.MOVE_RIGHT:
            return self._moved(self.controller.move_right(piece))
        if command == Command.ROTATE_CW:
            return self._moved(self.controller.rotate_cw(piece))
        if command == Command.ROTATE_CCW:
            return self._moved(self.controller.rotate_ccw(piece))
        if command == Command.SOFT_DROP:
            dropped = self.controller.soft_drop(piece)
            if dropped is None:
                return CommandResult.REJECTED
            self.active = dropped
            self.phase = GamePhase.FALLING
            return CommandResult.APPLIED
        # HARD_DROP
        self.active = self.controller.hard_drop(piece)
        self._lock()
        return CommandResult.APPLIED

    def step(self, command: Union[Command, int]) -> Tuple[CommandResult, Snapshot]:
        result = self.apply(command)
        return result, self.snapshot()

    def legal_commands(self) -> List[Command]:
        """Commands that would currently change the session."""
        if self.game_over:
            return [Command.RESET]
        if self.paused:
            return [Command.RESUME, Command.RESET]
        assert self.active is not None
        piece = self.active
        ctl = self.controller
        probes = {
            Command.MOVE_LEFT: ctl.move_left(piece),
            Command.MOVE_RIGHT: ctl.move_right(piece),
            Command.ROTATE_CW: ctl.rotate_cw(piece),
            Command.ROTATE_CCW: ctl.rotate_ccw(piece),
            Command.SOFT_DROP: ctl.soft_drop(piece),
        }
        legal = [cmd for cmd, moved in probes.items() if moved is not None]
        legal.extend([Command.HARD_DROP, Command.TICK, Command.PAUSE, Command.RESET])
        return legal

    # ------------------------------------------------------------------
    # Observation
    # ------------------------------------------------------------------
    @property
    def game_over(self) -> bool:
        return self.phase == GamePhase.GAME_OVER

    @property
    def score(self) -> int:
        return self.scores.score

    @property
    def level(self) -> int:
        return self.scores.level

    @property
    def lines_cleared(self) -> int:
        return self.scores.lines_cleared

    @property
    def fall_interval_ms(self) -> float:
        return self.scores.fall_interval_ms()

    def ghost(self) -> Optional[Piece]:
        if self.active is None or self.game_over:
            return None
        return self.controller.ghost(self.active)

    def snapshot(self) -> Snapshot:
        grid = self.grid.clone_state()
        grid.flags.writeable = False
        return Snapshot(
            grid=grid,
            active=self.active,
            ghost=self.ghost(),
            next_queue=tuple(self.next_queue),
            score=self.score,
            level=self.level,
            lines_cleared=self.lines_cleared,
            elapsed_ms=self.elapsed_ms,
            game_over=self.game_over,
            phase=self.phase,
            config=self.config,
            game_over_reason=self.game_over_reason,
            fall_interval_ms=self.fall_interval_ms,
            clear_counts=self.scores.clear_counts,
            paused=self.paused,
            rules=self.rules,
        )

    # ------------------------------------------------------------------
    # Save / load
    # ------------------------------------------------------------------
    def restore(self, snapshot: Snapshot) -> None:
        """Replace the session with the state held by ``snapshot``."""
        self.rules = snapshot.rules
        self._apply_config(snapshot.config)
        self.grid.load_state(snapshot.grid)
        self.scores.restore(snapshot.score, snapshot.lines_cleared, snapshot.clear_counts)
        self.next_queue = deque(snapshot.next_queue)
        self._refill_queue()
        self.active = snapshot.active
        self.phase = snapshot.phase
        self.game_over_reason = snapshot.game_over_reason
        self.elapsed_ms = float(snapshot.elapsed_ms)
        self.last_clear = None
        self.paused = snapshot.paused and not self.game_over
        self._clear_lock_state()
        if self.phase == GamePhase.LOCKING:
            self._lock_ticks_left = max(1, self.config.lock_delay_ticks)
        elif self.phase in (GamePhase.SPAWNING, GamePhase.CLEARING) or (
            self.active is None and not self.game_over
        ):
            self._spawn()

    def load(self, payload: Union[str, bytes, Dict[str, Any]]) -> Snapshot:
        """Restore a session from its persisted form.

        On a corrupt payload the session is reset and the error re-raised.
        """
        try:
            snapshot = loads(payload) if isinstance(payload, (str, bytes)) else decode_session(payload)
        except CorruptSnapshotError as exc:
            logger.warning("rejected saved session: %s", exc)
            self.reset()
            raise
        self.restore(snapshot)
        return self.snapshot()

    def save(self) -> Dict[str, Any]:
        return encode_session(self.snapshot())
