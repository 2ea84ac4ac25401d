"""Демонстрация. Запуск: python main.py [--capacity 2000000] [--add content] [--query content content2]"""

import argparse
import logging

from bloom_filter import BloomFilter, BloomFilterError

CAPACITY = 2_000_000


def main(argv=None):
    p = argparse.ArgumentParser(description="Bloom filter demo")
    p.add_argument("--capacity",   type=int,   default=CAPACITY, help="Максимум элементов")
    p.add_argument("--error-rate", type=float, default=None,     help="Доля ложноположительных, по умолчанию 1/capacity")
    p.add_argument("--add",        nargs="*",  default=["content"],             help="Добавляемые строки")
    p.add_argument("--query",      nargs="*",  default=["content", "content2"], help="Проверяемые строки")
    p.add_argument("--verbose",    action="store_true", help="Показать параметры фильтра")
    args = p.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(asctime)s - %(levelname)s - %(message)s")

    try:
        bf = BloomFilter(args.capacity, args.error_rate)
    except BloomFilterError as e:
        p.error(str(e))

    for item in args.add:
        bf.add(item)

    for item in args.query:
        print(bf.contains(item))


if __name__ == "__main__":
    main()
