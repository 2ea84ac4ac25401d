"""Bloom Filter - вероятностная структура для проверки принадлежности."""

import logging
import math
import numbers
from dataclasses import dataclass, field
from typing import Generic, List, Optional, TypeVar

import numpy as np

from hash_strategies import (
    BUILTIN_STRATEGIES,
    HashFunction,
    composite_hash,
    primary_hash,
)

T = TypeVar("T")

MAX_INT = 2**31 - 1
MAX_BIT_ARRAY_SIZE = 2**40
FALLBACK_DECAY = 0.6185
LN2 = math.log(2)


class BloomFilterError(ValueError):
    """Базовая ошибка конструирования фильтра."""


class InvalidCapacity(BloomFilterError):
    pass


class InvalidErrorRate(BloomFilterError):
    pass


class CapacityOverflow(BloomFilterError):
    pass


class MissingHashStrategy(BloomFilterError):
    pass


def best_error_rate(capacity: int) -> float:
    """
    Уровень ложноположительных срабатываний по умолчанию: 1/capacity.

    Если деление дает ровно 0, используется затухание 0.6185^(MAX_INT/capacity).
    Это приближение, а не гарантия: для таких capacity результат близок к 1
    и конструктор отклонит его как InvalidErrorRate.
    """
    rate = 1 / capacity
    if rate != 0:
        return rate
    return FALLBACK_DECAY ** (MAX_INT / capacity)


def compute_bit_size(capacity: int, error_rate: float) -> int:
    """Оптимальный m = -n*ln(p) / (ln2)^2."""
    return math.ceil(capacity * math.log(error_rate, 1 / 2 ** LN2))


def compute_hash_count(capacity: int, bit_size: int) -> int:
    """Оптимальное k = (m/n) * ln(2), не меньше одной функции."""
    return max(1, round(LN2 * bit_size / capacity))


@dataclass
class BloomConfig:
    capacity: int  # максимальное число различных элементов
    error_rate: Optional[float] = None  # None -> best_error_rate(capacity)
    m: int = field(init=False)  # размер битового массива
    k: int = field(init=False)  # количество хеш-функций

    def __post_init__(self):
        if (isinstance(self.capacity, bool) or not isinstance(self.capacity, numbers.Integral)
                or self.capacity < 1):
            raise InvalidCapacity(f"capacity must be > 0, got {self.capacity!r}")
        # numpy-целые приводятся к int
        self.capacity = int(self.capacity)

        if self.error_rate is None:
            self.error_rate = best_error_rate(self.capacity)
        if (isinstance(self.error_rate, bool) or not isinstance(self.error_rate, numbers.Real)
                or not 0 < self.error_rate < 1):
            raise InvalidErrorRate(
                f"error_rate must be between 0 and 1, exclusive. Was {self.error_rate}"
            )
        self.error_rate = float(self.error_rate)

        try:
            m = compute_bit_size(self.capacity, self.error_rate)
        except OverflowError:
            m = 0
        if m < 1 or m > MAX_BIT_ARRAY_SIZE:
            raise CapacityOverflow(
                f"capacity={self.capacity} and error_rate={self.error_rate} "
                f"would need a bit array outside 1..{MAX_BIT_ARRAY_SIZE}; "
                "reduce capacity or relax error_rate"
            )
        self.m = m
        self.k = compute_hash_count(self.capacity, m)


class BloomFilter(Generic[T]):
    """
    Bloom Filter с double hashing: k индексов из двух базовых хешей.

    Вторичный хеш выбирается по объявленному element_type (str, int)
    или передается явно через secondary_hash. Элементы не инспектируются.
    """

    def __init__(self, capacity: int, error_rate: Optional[float] = None,
                 element_type: type = str,
                 secondary_hash: Optional[HashFunction] = None):
        self.config = BloomConfig(capacity, error_rate)
        self.element_type = element_type
        self.secondary_hash = self._resolve_secondary_hash(element_type, secondary_hash)
        self.m = self.config.m
        self.k = self.config.k
        # упакованный битовый массив: бит i лежит в байте i >> 3
        self.bits = np.zeros((self.m + 7) // 8, dtype=np.uint8)
        self.n = 0
        logging.debug("BloomFilter capacity=%d error_rate=%g m=%d k=%d",
                      capacity, self.config.error_rate, self.m, self.k)

    @staticmethod
    def _resolve_secondary_hash(element_type: type,
                                secondary_hash: Optional[HashFunction]) -> HashFunction:
        if secondary_hash is not None:
            return secondary_hash
        strategy = BUILTIN_STRATEGIES.get(element_type)
        if strategy is None:
            name = getattr(element_type, "__name__", repr(element_type))
            raise MissingHashStrategy(
                f"Please provide a secondary_hash for element type {name}"
            )
        return strategy

    def positions(self, item: T) -> List[int]:
        """Индексы битов для элемента, по одному на каждую из k функций."""
        h1 = primary_hash(item)
        h2 = self.secondary_hash(item)
        return [composite_hash(h1, h2, i, self.m) for i in range(self.k)]

    def add(self, item: T) -> None:
        for idx in self.positions(item):
            self.bits[idx >> 3] |= 1 << (idx & 7)
        self.n += 1

    def contains(self, item: T) -> bool:
        h1 = primary_hash(item)
        h2 = self.secondary_hash(item)
        for i in range(self.k):
            idx = composite_hash(h1, h2, i, self.m)
            if not self.bits[idx >> 3] & (1 << (idx & 7)):
                # истинно-отрицательный ответ
                return False
        return True

    def __contains__(self, item: T) -> bool:
        return self.contains(item)

    def _check_compatible(self, other: 'BloomFilter') -> None:
        if ((self.m, self.k) != (other.m, other.k)
                or self.secondary_hash is not other.secondary_hash):
            raise ValueError("Incompatible filters")

    def _empty_like(self) -> 'BloomFilter':
        return BloomFilter(self.config.capacity, self.config.error_rate,
                           self.element_type, self.secondary_hash)

    def __or__(self, other: 'BloomFilter') -> 'BloomFilter':
        """Объединение фильтров."""
        self._check_compatible(other)
        result = self._empty_like()
        result.bits = self.bits | other.bits
        result.n = self.n + other.n
        return result

    def __and__(self, other: 'BloomFilter') -> 'BloomFilter':
        """Пересечение фильтров."""
        self._check_compatible(other)
        result = self._empty_like()
        result.bits = self.bits & other.bits
        return result

    @property
    def fill_ratio(self) -> float:
        """Доля установленных битов."""
        return int(np.unpackbits(self.bits).sum()) / self.m

    @property
    def fpr(self) -> float:
        """False Positive Rate: (1 - e^(-kn/m))^k."""
        if self.n == 0:
            return 0.0
        return float((1 - np.exp(-self.k * self.n / self.m)) ** self.k)

    def __repr__(self) -> str:
        return (f"BloomFilter(capacity={self.config.capacity}, "
                f"error_rate={self.config.error_rate:g}, m={self.m}, k={self.k})")
