from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, fields, replace
from importlib.resources import files as resource_files
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from .fov.fog_of_war import FovSettings

logger = logging.getLogger(__name__)

# Environment variable overrides (useful for tests and power users)
ENV_ALGO = "DEEPDIVE_ALGO"
ENV_WIDTH = "DEEPDIVE_WIDTH"
ENV_HEIGHT = "DEEPDIVE_HEIGHT"
ENV_SEED = "DEEPDIVE_SEED"
ENV_FOV_RADIUS = "DEEPDIVE_FOV_RADIUS"


class ConfigError(ValueError):
    """Raised when a settings file cannot be read or holds invalid values."""


@dataclass
class GenerationSettings:
    """Knobs for level generation and stair placement.

    - algorithm: generator variant name ("organic" or "open").
    - width/height: level size in tiles.
    - seed: master seed; None means a fresh random seed per run.
    - boundary_min_cells/boundary_max_cells: band the organic blob's target size is drawn from.
    - compact_radius/accept_probability: blob roundness controls.
    - max_depth: deepest level index; it gets no down stairs.
    - stair_min_separation/stair_max_attempts: soft Manhattan separation between stairs.
    """

    algorithm: str = "organic"
    width: int = 80
    height: int = 50
    seed: Optional[int | str] = None
    boundary_min_cells: int = 300
    boundary_max_cells: int = 400
    compact_radius: float = 12.0
    accept_probability: float = 0.7
    max_depth: int = 50
    stair_min_separation: int = 5
    stair_max_attempts: int = 100

    def __post_init__(self) -> None:
        if self.width < 3 or self.height < 3:
            raise ValueError("width/height must be >= 3")
        if self.boundary_min_cells < 1 or self.boundary_max_cells < self.boundary_min_cells:
            raise ValueError("boundary cell band must satisfy 1 <= min <= max")
        if not (0.0 < self.accept_probability <= 1.0):
            raise ValueError("accept_probability must be in (0.0, 1.0]")
        if self.compact_radius <= 0:
            raise ValueError("compact_radius must be > 0")
        if self.max_depth < 0:
            raise ValueError("max_depth must be >= 0")
        if self.stair_max_attempts < 1:
            raise ValueError("stair_max_attempts must be >= 1")

    @classmethod
    def from_env(cls, base: Optional["GenerationSettings"] = None) -> "GenerationSettings":
        """Apply DEEPDIVE_* environment overrides on top of ``base`` (or defaults)."""
        settings = base or cls()
        changes: Dict[str, Any] = {}
        if ENV_ALGO in os.environ:
            changes["algorithm"] = os.environ[ENV_ALGO]
        if ENV_WIDTH in os.environ:
            changes["width"] = _env_int(ENV_WIDTH)
        if ENV_HEIGHT in os.environ:
            changes["height"] = _env_int(ENV_HEIGHT)
        if ENV_SEED in os.environ:
            raw = os.environ[ENV_SEED].strip()
            changes["seed"] = int(raw) if raw.lstrip("-").isdigit() else raw
        if changes:
            logger.debug("GenerationSettings env overrides: %s", changes)
        return replace(settings, **changes)


@dataclass
class Settings:
    generation: GenerationSettings = field(default_factory=GenerationSettings)
    fov: FovSettings = field(default_factory=FovSettings)
    save_dir: Optional[str] = None


def _env_int(key: str) -> int:
    raw = os.environ[key]
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigError(f"{key} must be an integer, got {raw!r}") from e


def _build(cls, raw: Mapping[str, Any], section: str):
    if not isinstance(raw, Mapping):
        raise ConfigError(f"[{section}] must be a mapping")
    known = {f.name for f in fields(cls)}
    unknown = sorted(set(raw) - known)
    if unknown:
        logger.warning("Ignoring unknown keys in [%s]: %s", section, ", ".join(unknown))
    try:
        return cls(**{k: v for k, v in raw.items() if k in known})
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid [{section}] settings: {e}") from e


def load_settings(path: Optional[str | Path] = None, *, apply_env: bool = True) -> Settings:
    """Load settings from YAML.

    If path is None, loads the embedded default resource at
    deepdive/data/settings.yaml. Environment overrides are applied last.
    """
    if path is None:
        data = resource_files("deepdive.data").joinpath("settings.yaml").read_text(encoding="utf-8")
        logger.debug("Loaded embedded settings resource")
    else:
        try:
            data = Path(path).read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"Cannot read settings file {path}: {e}") from e
        logger.debug("Loaded settings from path: %s", path)

    try:
        raw = yaml.safe_load(data) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Malformed settings YAML: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigError("Settings YAML must be a mapping at the top level")

    generation = _build(GenerationSettings, raw.get("generation") or {}, "generation")
    fov = _build(FovSettings, raw.get("fov") or {}, "fov")
    save_dir = raw.get("save_dir")

    if apply_env:
        generation = GenerationSettings.from_env(generation)
        if ENV_FOV_RADIUS in os.environ:
            fov = replace(fov, radius=_env_int(ENV_FOV_RADIUS))

    settings = Settings(generation=generation, fov=fov, save_dir=save_dir)
    logger.info(
        "Settings: algorithm=%s size=%dx%d fov_radius=%d",
        generation.algorithm,
        generation.width,
        generation.height,
        fov.radius,
    )
    return settings
