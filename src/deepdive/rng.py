from __future__ import annotations

import hashlib
import json
import logging
import random
import secrets
from dataclasses import dataclass
from typing import Any, Optional, Union

logger = logging.getLogger(__name__)

SeedLike = Union[int, str, bytes, None]

LEVEL_LAYOUT = "level_layout"
LEVEL_REGEN = "level_regen"


def _to_stable_json(value: Any) -> str:
    """Stable JSON encoding for hashing; key order and spacing never vary."""
    return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


@dataclass(frozen=True)
class RNGManager:
    """Derives independent, reproducible ``random.Random`` streams from one master seed.

    Every consumer gets its own generator, so the layout of depth 3 does not
    depend on how many random numbers depth 2 consumed:

        rngm = RNGManager(1234)
        layout_rng = rngm.level_rng(3)
        regen_rng = rngm.context_rng(LEVEL_REGEN, 3, 1)

    The master seed can be an int, str or bytes; None draws a random one.
    """

    master_seed: SeedLike = None

    def __post_init__(self) -> None:
        if self.master_seed is None:
            raw = secrets.token_bytes(16)
            logger.info("No master seed provided; generated random seed: %s", raw.hex())
        else:
            raw = self._canonicalize_seed(self.master_seed)
            logger.debug("Using master seed: %r", self.master_seed)
        object.__setattr__(self, "_master_seed_bytes", raw)

    @staticmethod
    def _canonicalize_seed(seed: SeedLike) -> bytes:
        if isinstance(seed, bytes):
            return seed
        if isinstance(seed, int):
            if seed < 0:
                return seed.to_bytes(seed.bit_length() // 8 + 1, "big", signed=True)
            length = (seed.bit_length() + 7) // 8 or 1
            return seed.to_bytes(length, "big", signed=False)
        if isinstance(seed, str):
            return seed.strip().encode("utf-8")
        raise TypeError("Unsupported seed type: %r" % (type(seed),))

    def derive_seed(self, domain: str, *identifiers: Any) -> int:
        """64-bit seed for ``domain`` + identifiers (depth, regeneration count, ...)."""
        payload = {
            "domain": domain,
            "ids": identifiers,
            "master": self._master_seed_bytes.hex(),
        }
        digest = hashlib.blake2b(_to_stable_json(payload).encode("utf-8"), digest_size=8).digest()
        seed_int = int.from_bytes(digest, "big", signed=False)
        logger.debug("Derived seed for domain=%s ids=%s -> %d", domain, identifiers, seed_int)
        return seed_int

    def context_rng(self, domain: str, *identifiers: Any) -> random.Random:
        return random.Random(self.derive_seed(domain, *identifiers))

    def level_rng(self, depth: int, generation: Optional[int] = None) -> random.Random:
        """Layout stream for a depth; ``generation`` > 0 selects a regenerated variant."""
        if generation:
            return self.context_rng(LEVEL_REGEN, depth, generation)
        return self.context_rng(LEVEL_LAYOUT, depth)

    def get_master_seed_hex(self) -> str:
        return self._master_seed_bytes.hex()
