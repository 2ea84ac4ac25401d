"""Эксперименты: реальный FPR против заданного error_rate."""

import argparse
from typing import List, Optional, Tuple

import matplotlib.pyplot as plt
import numpy as np
from scipy import stats
from tqdm import tqdm

from bloom_filter import BloomFilter, BloomConfig


def generate_dataset(size: int, absent: int, seed: Optional[int] = None) -> tuple:
    # train и test с разными префиксами - ГАРАНТИРОВАННО не пересекаются
    salt = np.random.randint(0, 10**6) if seed is None else seed
    train = [f"train_{salt}_{i}" for i in range(size)]
    test = [f"test_{salt}_{i}" for i in range(absent)]
    return train, test


def measure_fpr(capacity: int, error_rate: Optional[float] = None, inserted: Optional[int] = None,
                samples: int = 100_000, seed: Optional[int] = None) -> Tuple[float, BloomFilter]:
    """Заполнить фильтр inserted элементами (по умолчанию capacity) и измерить FPR."""
    bf = BloomFilter(capacity, error_rate)
    train, test = generate_dataset(capacity if inserted is None else inserted, samples, seed)
    for item in train:
        bf.add(item)
    fp = sum(1 for item in test if item in bf)
    return fp / samples, bf


def fpr_confidence_interval(fp: int, samples: int, confidence: float = 0.95) -> Tuple[float, float]:
    """Доверительный интервал Клоппера-Пирсона для доли ложноположительных."""
    ci = stats.binomtest(fp, samples).proportion_ci(confidence_level=confidence, method="exact")
    return ci.low, ci.high


def within_target(fpr: float, error_rate: float, samples: int, confidence: float = 0.99) -> bool:
    """Попадает ли error_rate в доверительный интервал измеренного FPR (или выше него)."""
    low, _ = fpr_confidence_interval(round(fpr * samples), samples, confidence)
    return low <= error_rate


def error_rate_sweep(capacity: int, rates: List[float], samples: int = 20_000) -> np.ndarray:
    """Реальный FPR для каждого error_rate при заполнении до capacity."""
    results = np.zeros(len(rates))
    for i, p in enumerate(tqdm(rates, desc="error_rate")):
        results[i], _ = measure_fpr(capacity, p, samples=samples, seed=i)
    return results


def bits_per_element(rates: List[float], capacity: int = 10_000) -> np.ndarray:
    """m/n для каждого error_rate: меньше ошибка - больше битов."""
    return np.array([BloomConfig(capacity, p).m / capacity for p in rates])


def plot_sweep(rates: List[float], measured: np.ndarray, capacity: int):
    fig, axes = plt.subplots(1, 2, figsize=(12, 5))
    fig.suptitle(f"Bloom Filter (capacity={capacity})")

    ax = axes[0]
    ax.plot(rates, measured, 'o-', color='steelblue', label='Реальный')
    ax.plot(rates, rates, 's--', color='gray', label='Заданный', alpha=0.7)
    ax.set_xlabel("error_rate")
    ax.set_ylabel("FPR")
    ax.set_xscale('log')
    ax.set_yscale('symlog', linthresh=1e-5)
    ax.legend()
    ax.grid(True, alpha=0.3)

    ax = axes[1]
    ax.plot(rates, bits_per_element(rates, capacity), 'o-', color='tomato')
    ax.set_xlabel("error_rate")
    ax.set_ylabel("m / n (битов на элемент)")
    ax.set_xscale('log')
    ax.grid(True, alpha=0.3)

    plt.tight_layout()
    plt.savefig("bloom_fpr_sweep.png", dpi=300)
    print("Сохранено: bloom_fpr_sweep.png")


if __name__ == "__main__":
    p = argparse.ArgumentParser()
    p.add_argument("--capacity", type=int, default=10_000)
    p.add_argument("--samples", type=int, default=100_000)
    p.add_argument("--plot", action="store_true")
    args = p.parse_args()

    fpr, bf = measure_fpr(args.capacity, samples=args.samples)
    low, high = fpr_confidence_interval(round(fpr * args.samples), args.samples)
    print(bf)
    print(f"FPR={fpr:.6f} (95% CI {low:.6f}..{high:.6f}), теория={bf.fpr:.6f}, "
          f"заданный={bf.config.error_rate:.6f}")

    if args.plot:
        rates = [0.1, 0.05, 0.01, 0.005, 0.001, 0.0005, 0.0001]
        plot_sweep(rates, error_rate_sweep(args.capacity, rates), args.capacity)
