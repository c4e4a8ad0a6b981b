from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace
from typing import List, Optional

from .config import ConfigError, Settings, load_settings
from .dungeon.factory import generate_level_with_stairs
from .explore.targets import count_unexplored
from .game import GameSession
from .level.saved import SavedLevel
from .map.tiles import TileType
from .rng import RNGManager
from .save.store import LevelStore

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="deepdive", description="Dungeon level generation and exploration")
    p.add_argument("--config", type=str, default=None, help="Settings YAML (defaults to the bundled file)")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    sub = p.add_subparsers(dest="command", required=True)

    gen = sub.add_parser("generate", help="Generate one level and print it")
    gen.add_argument("--seed", type=str, default=None)
    gen.add_argument("--depth", type=int, default=1)
    gen.add_argument("--width", type=int, default=None)
    gen.add_argument("--height", type=int, default=None)
    gen.add_argument("--algorithm", type=str, default=None, help="organic or open")
    gen.add_argument("--json", action="store_true", help="Print the saved-level JSON instead of ASCII")

    exp = sub.add_parser("explore", help="Autoexplore a generated level to exhaustion")
    exp.add_argument("--seed", type=str, default=None)
    exp.add_argument("--depth", type=int, default=1)
    exp.add_argument("--max-ticks", type=int, default=10000)
    return p


def _seed_arg(raw: Optional[str]):
    if raw is None:
        return None
    return int(raw) if raw.lstrip("-").isdigit() else raw


def _apply_args(settings: Settings, args: argparse.Namespace) -> Settings:
    changes = {}
    if args.seed is not None:
        changes["seed"] = _seed_arg(args.seed)
    for name in ("width", "height", "algorithm"):
        value = getattr(args, name, None)
        if value is not None:
            changes[name] = value
    if not changes:
        return settings
    return replace(settings, generation=replace(settings.generation, **changes))


def cmd_generate(settings: Settings, args: argparse.Namespace) -> int:
    gen = settings.generation
    rngm = RNGManager(gen.seed)
    grid, placement = generate_level_with_stairs(gen, args.depth, rngm.level_rng(args.depth))
    if args.json:
        print(json.dumps(SavedLevel.from_map(grid, "caverns").to_dict(), sort_keys=True))
        return 0
    print("\n".join(grid.to_ascii()))
    floors = grid.count(TileType.FLOOR)
    print(
        f"seed={rngm.get_master_seed_hex()} depth={args.depth} size={grid.width}x{grid.height} "
        f"floor={floors} ({100.0 * floors / (grid.width * grid.height):.1f}%) "
        f"up={placement.up} down={placement.down} separated={placement.separated}"
    )
    return 0


def cmd_explore(settings: Settings, args: argparse.Namespace) -> int:
    # Each run starts from fresh levels rather than whatever an earlier seed left on disk
    store = LevelStore(settings.save_dir)
    store.clear()
    session = GameSession(settings, store=store, depth=args.depth)
    start_unexplored = count_unexplored(session.grid, session.fog)
    ticks = 0
    if session.start_autoexplore():
        while session.controller is not None and ticks < args.max_ticks:
            session.tick()
            ticks += 1
    left = count_unexplored(session.grid, session.fog)
    print(f"ticks={ticks} discovered={start_unexplored - left} unexplored_left={left}")
    for line in session.report_cache_stats():
        print(line)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="[%(levelname)s] %(name)s: %(message)s",
    )

    try:
        settings = _apply_args(load_settings(args.config), args)
    except (ConfigError, ValueError) as e:
        logger.error("%s", e)
        return 2

    if args.command == "generate":
        return cmd_generate(settings, args)
    return cmd_explore(settings, args)


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
