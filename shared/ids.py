"""Identifier helpers shared by domain and gateway adapters."""
from __future__ import annotations

import random
import string
import time
from typing import Optional

BASE36_ALPHABET = string.digits + string.ascii_lowercase


def epoch_millis() -> int:
    return time.time_ns() // 1_000_000


def random_base36(length: int = 9, rng: Optional[random.Random] = None) -> str:
    """随机 base36 后缀（唯一性来自时间戳 + 随机数，不要求不可预测）。"""
    r = rng or random
    return "".join(r.choice(BASE36_ALPHABET) for _ in range(length))


def transaction_id(prefix: str, rng: Optional[random.Random] = None) -> str:
    """`<prefix>_<epochMillis>_<base36>`"""
    return f"{prefix}_{epoch_millis()}_{random_base36(rng=rng)}"
