"""Seeded determinism for the randomized effects (noise, vintage grain)."""

import hashlib

import numpy as np


def derive_seed(base_seed: int, effect_id: str, user_seed: int = 0) -> int:
    """Derive a deterministic seed from context. Same inputs = same output, always."""
    key = f"{base_seed}:{effect_id}:{user_seed}"
    return int(hashlib.sha256(key.encode()).hexdigest()[:16], 16)


def make_rng(seed: int | None = None) -> np.random.Generator:
    """Create an RNG. ``None`` draws fresh entropy from the OS."""
    return np.random.default_rng(seed)
