"""Persisted session layout.

A saved session is a JSON-compatible dict::

    {
      "version": 1,
      "saved_at": "2024-01-01T12:00:00+00:00",
      "width": 10, "height": 20,
      "grid": [null, "I", ...],          # row-major, width * height entries
      "active": {"kind": "T", "rotation": 0, "col": 3, "row": 5} | null,
      "next_queue": ["S", ...],
      "score": 0, "level": 1, "lines_cleared": 0, "elapsed_ms": 0.0,
      "game_over": false, "game_over_reason": null, "phase": "falling",
      "paused": false,
      "clear_counts": {"single": 0, "double": 0, "triple": 0, "tetris": 0},
      "config": {...},
      "rules": {"line_clear_scores": [100, 300, 500, 800], "lines_per_level": 10}
    }

Decoding validates everything and raises ``CorruptSnapshotError`` on the first
problem found.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

import numpy as np

from .collision import piece_fits
from .config import GameConfig
from .controller import PieceController
from .errors import ConfigError, CorruptSnapshotError
from .grid import GameGrid
from .pieces import ROTATION_STATES, Piece, TetrominoType
from .rules import CLEAR_NAMES, ScoreEngine, ScoringRules
from .state import GameOverReason, GamePhase, Snapshot

logger = logging.getLogger(__name__)

FORMAT_VERSION = 1


def _kind_name(value: int) -> Optional[str]:
    return TetrominoType(int(value)).name if value else None


def _piece_to_dict(piece: Optional[Piece]) -> Optional[Dict[str, Any]]:
    if piece is None:
        return None
    return {"kind": piece.kind.name, "rotation": piece.rotation, "col": piece.col, "row": piece.row}


def encode_session(snapshot: Snapshot, saved_at: Optional[datetime] = None) -> Dict[str, Any]:
    saved_at = saved_at or datetime.now(timezone.utc)
    return {
        "version": FORMAT_VERSION,
        "saved_at": saved_at.isoformat(),
        "width": snapshot.width,
        "height": snapshot.height,
        "grid": [_kind_name(v) for v in snapshot.grid.reshape(-1)],
        "active": _piece_to_dict(snapshot.active),
        "next_queue": [kind.name for kind in snapshot.next_queue],
        "score": snapshot.score,
        "level": snapshot.level,
        "lines_cleared": snapshot.lines_cleared,
        "elapsed_ms": snapshot.elapsed_ms,
        "game_over": snapshot.game_over,
        "game_over_reason": snapshot.game_over_reason.value if snapshot.game_over_reason else None,
        "phase": snapshot.phase.value,
        "paused": snapshot.paused,
        "clear_counts": dict(snapshot.clear_counts),
        "config": snapshot.config.to_dict(),
        "rules": snapshot.rules.to_dict(),
    }


def dumps(snapshot: Snapshot, saved_at: Optional[datetime] = None, indent: Optional[int] = 2) -> str:
    return json.dumps(encode_session(snapshot, saved_at), indent=indent)


def loads(text: Union[str, bytes]) -> Snapshot:
    try:
        payload = json.loads(text)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise CorruptSnapshotError(f"saved session is not valid JSON: {exc}") from exc
    return decode_session(payload)


# ----------------------------------------------------------------------
# Decoding
# ----------------------------------------------------------------------
def _require(payload: Dict[str, Any], key: str) -> Any:
    if key not in payload:
        raise CorruptSnapshotError(f"missing field {key!r}")
    return payload[key]


def _int_field(payload: Dict[str, Any], key: str, minimum: int = 0) -> int:
    value = _require(payload, key)
    if isinstance(value, bool) or not isinstance(value, int) or value < minimum:
        raise CorruptSnapshotError(f"field {key!r} must be an integer >= {minimum}, got {value!r}")
    return value


def _parse_kind(tag: Any) -> TetrominoType:
    if not isinstance(tag, str) or tag not in TetrominoType.__members__:
        raise CorruptSnapshotError(f"unknown piece kind {tag!r}")
    return TetrominoType[tag]


def _parse_piece(data: Any) -> Optional[Piece]:
    if data is None:
        return None
    if not isinstance(data, dict):
        raise CorruptSnapshotError("active piece must be an object or null")
    kind = _parse_kind(_require(data, "kind"))
    rotation = _require(data, "rotation")
    if isinstance(rotation, bool) or not isinstance(rotation, int) or not 0 <= rotation < ROTATION_STATES:
        raise CorruptSnapshotError(f"invalid rotation index {rotation!r}")
    col, row = _require(data, "col"), _require(data, "row")
    if any(isinstance(v, bool) or not isinstance(v, int) for v in (col, row)):
        raise CorruptSnapshotError("active piece anchor must be integers")
    return Piece(kind=kind, rotation=rotation, col=col, row=row)


def _parse_grid(tags: Any, width: int, height: int) -> np.ndarray:
    if not isinstance(tags, list):
        raise CorruptSnapshotError("grid must be a list")
    if len(tags) != width * height:
        raise CorruptSnapshotError(f"grid has {len(tags)} cells, expected {width * height}")
    values: List[int] = [0 if tag is None else int(_parse_kind(tag)) for tag in tags]
    return np.array(values, dtype=np.int8).reshape((height, width))


def decode_session(payload: Dict[str, Any]) -> Snapshot:
    if not isinstance(payload, dict):
        raise CorruptSnapshotError("saved session must be an object")
    version = _require(payload, "version")
    if version != FORMAT_VERSION:
        raise CorruptSnapshotError(f"unsupported save format version {version!r}")

    try:
        config = GameConfig.from_dict(_require(payload, "config"))
    except (ConfigError, TypeError, ValueError) as exc:
        raise CorruptSnapshotError(f"invalid config: {exc}") from exc
    # sessions saved without a rules block used the default scoring
    try:
        rules = ScoringRules.from_dict(payload.get("rules") or {})
    except (ConfigError, TypeError) as exc:
        raise CorruptSnapshotError(f"invalid scoring rules: {exc}") from exc

    width = _int_field(payload, "width", minimum=1)
    height = _int_field(payload, "height", minimum=1)
    if (width, height) != (config.width, config.height):
        raise CorruptSnapshotError(
            f"grid is {width}x{height} but config expects {config.width}x{config.height}"
        )
    grid = GameGrid(width, height)
    grid.load_state(_parse_grid(_require(payload, "grid"), width, height))
    if grid.full_rows():
        raise CorruptSnapshotError(f"grid contains full rows {grid.full_rows()}")

    active = _parse_piece(_require(payload, "active"))
    if active is not None and not piece_fits(grid, active):
        raise CorruptSnapshotError(f"active piece {active} overlaps the board")

    queue_tags = _require(payload, "next_queue")
    if not isinstance(queue_tags, list) or not queue_tags:
        raise CorruptSnapshotError("next_queue must be a non-empty list")
    next_queue = tuple(_parse_kind(tag) for tag in queue_tags)

    score = _int_field(payload, "score")
    lines_cleared = _int_field(payload, "lines_cleared")
    level = _int_field(payload, "level", minimum=1)
    scores = ScoreEngine(config, rules)
    if level != scores.level_for_lines(lines_cleared):
        raise CorruptSnapshotError(f"level {level} does not match {lines_cleared} lines cleared")

    elapsed_ms = _require(payload, "elapsed_ms")
    if isinstance(elapsed_ms, bool) or not isinstance(elapsed_ms, (int, float)) or elapsed_ms < 0:
        raise CorruptSnapshotError(f"invalid elapsed_ms {elapsed_ms!r}")

    try:
        phase = GamePhase(_require(payload, "phase"))
        reason_value = payload.get("game_over_reason")
        reason = GameOverReason(reason_value) if reason_value is not None else None
    except ValueError as exc:
        raise CorruptSnapshotError(str(exc)) from exc
    game_over = bool(_require(payload, "game_over"))
    if game_over != (phase == GamePhase.GAME_OVER):
        raise CorruptSnapshotError("game_over flag disagrees with phase")
    if active is None and phase in (GamePhase.FALLING, GamePhase.LOCKING):
        raise CorruptSnapshotError(f"phase {phase.value} requires an active piece")
    paused = payload.get("paused", False)
    if not isinstance(paused, bool):
        raise CorruptSnapshotError(f"invalid paused flag {paused!r}")
    if paused and game_over:
        raise CorruptSnapshotError("a finished session cannot be paused")

    counts = payload.get("clear_counts") or {}
    if not isinstance(counts, dict) or set(counts) - set(CLEAR_NAMES.values()):
        raise CorruptSnapshotError(f"invalid clear_counts {counts!r}")
    clear_counts = {name: _int_field(counts, name) for name in counts}

    ghost = None
    if active is not None and not game_over:
        ghost = PieceController(grid, config.wall_kicks).ghost(active)

    state = grid.clone_state()
    state.flags.writeable = False
    logger.debug("decoded session saved at %s", payload.get("saved_at"))
    return Snapshot(
        grid=state,
        active=active,
        ghost=ghost,
        next_queue=next_queue,
        score=score,
        level=level,
        lines_cleared=lines_cleared,
        elapsed_ms=float(elapsed_ms),
        game_over=game_over,
        phase=phase,
        config=config,
        game_over_reason=reason,
        fall_interval_ms=scores.fall_interval_ms(level),
        clear_counts={**{name: 0 for name in CLEAR_NAMES.values()}, **clear_counts},
        paused=paused,
        rules=rules,
    )
