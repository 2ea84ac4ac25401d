"""Хеш-функции для Bloom Filter: первичный хеш, вторичные стратегии и double hashing."""

from typing import Any, Callable, Dict

MASK_32 = 0xFFFFFFFF

HashFunction = Callable[[Any], int]


def primary_hash(item: Any) -> int:
    """Собственный хеш элемента (встроенный hash())."""
    return hash(item)


def wang_hash(item: int) -> int:
    """
    Thomas Wang's 32-bit integer mix.

    Элемент трактуется как беззнаковое 32-битное число; ~11 операций.
    """
    x = int(item) & MASK_32
    x = (~x + (x << 15)) & MASK_32
    x ^= x >> 12
    x = (x + (x << 2)) & MASK_32
    x ^= x >> 4
    x = (x * 2057) & MASK_32
    x ^= x >> 16
    return x


def one_at_a_time(item: Any) -> int:
    """Bob Jenkins' one-at-a-time по UTF-8 байтам строкового представления."""
    h = 0
    for b in str(item).encode("utf-8"):
        h = (h + b) & MASK_32
        h = (h + (h << 10)) & MASK_32
        h ^= h >> 6
    h = (h + (h << 3)) & MASK_32
    h ^= h >> 11
    h = (h + (h << 15)) & MASK_32
    return h


# Встроенные стратегии по объявленному типу элементов
BUILTIN_STRATEGIES: Dict[type, HashFunction] = {
    str: one_at_a_time,
    int: wang_hash,
}


def composite_hash(h1: int, h2: int, i: int, m: int) -> int:
    """i-я симулированная хеш-функция: |h1 + i*h2| mod m."""
    return abs(h1 + i * h2) % m
