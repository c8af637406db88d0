#!/usr/bin/env python3
"""
Benchmark script for the outfit rating engine.

Builds a synthetic wardrobe from the loaded table labels, then times
``rate`` and ``find_alternatives`` and reports mean/p50/p95.

Usage:
    PYTHONPATH=src python scripts/benchmark_rating_engine.py
    PYTHONPATH=src python scripts/benchmark_rating_engine.py --rounds 500 --wardrobe-size 200
"""

import argparse
import os
import random
import statistics
import sys
import time

import numpy as np

sys.path.insert(0, os.path.join(os.path.dirname(os.path.abspath(__file__)), "..", "src"))

CATEGORY_TYPES = {
    "top": ["T-shirt", "Shirt", "Sweater", "Hoodie"],
    "bottom": ["Pants", "Jeans", "Shorts", "Skirt"],
    "footwear": ["Shoes", "Sneakers", "Boots", "Sandals"],
    "outerwear": ["Jacket", "Coat"],
    "accessory": ["Hat", "Accessories"],
}
TAGS = ["Classic", "Minimalist", "Streetwear", "Work/Office", "Date Night", "Summer", "Winter"]


def build_wardrobe(tables, size: int, rng: random.Random):
    """Random garments spread over every category."""
    from scoring.garments import GarmentAttributes

    categories = list(CATEGORY_TYPES)
    colors = list(tables.colors.labels)
    patterns = list(tables.patterns.labels)
    wardrobe = []
    for idx in range(size):
        category = categories[idx % len(categories)]
        wardrobe.append(GarmentAttributes(
            id=f"g{idx}",
            category=category,
            garment_type=rng.choice(CATEGORY_TYPES[category]),
            primary_color=rng.choice(colors),
            secondary_colors=tuple(rng.sample(colors, k=rng.randint(0, 2))),
            pattern=rng.choice(patterns) if rng.random() < 0.3 else "Solid",
            formality_level=float(rng.randint(1, 5)),
            tags=frozenset(rng.sample(TAGS, k=rng.randint(0, 3))),
        ))
    return wardrobe


def random_outfit(wardrobe, rng: random.Random):
    from scoring.garments import GarmentCategory, OutfitSelection

    by_cat = {}
    for garment in wardrobe:
        by_cat.setdefault(garment.category, []).append(garment)

    def pick(cat):
        return rng.choice(by_cat[cat]) if by_cat.get(cat) else None

    accessories = by_cat.get(GarmentCategory.ACCESSORY, [])
    return OutfitSelection(
        top=pick(GarmentCategory.TOP),
        bottom=pick(GarmentCategory.BOTTOM),
        footwear=pick(GarmentCategory.FOOTWEAR),
        outerwear=pick(GarmentCategory.OUTERWEAR) if rng.random() < 0.5 else None,
        accessories=tuple(rng.sample(accessories, k=min(len(accessories), rng.randint(0, 2)))),
    )


def summarize(label: str, times_ms):
    arr = np.asarray(times_ms)
    print(
        f"  {label:<14} "
        f"{statistics.mean(times_ms):8.3f}ms "
        f"{np.percentile(arr, 50):8.3f}ms "
        f"{np.percentile(arr, 95):8.3f}ms "
        f"{arr.max():8.3f}ms "
        f" {len(times_ms)}"
    )


def main():
    parser = argparse.ArgumentParser(description="Benchmark outfit rating engine")
    parser.add_argument("--rounds", type=int, default=200, help="Outfits to rate (default: 200)")
    parser.add_argument("--wardrobe-size", type=int, default=100, help="Synthetic wardrobe size (default: 100)")
    parser.add_argument("--tables", default=None, help="Compatibility table JSON (default: packaged)")
    parser.add_argument("--seed", type=int, default=7)
    args = parser.parse_args()

    from core.logging import configure_logging
    from scoring.rating_engine import RatingEngine
    from scoring.tables import load_compatibility_tables

    configure_logging(json_logs=False, log_level="WARNING")

    rng = random.Random(args.seed)
    tables = load_compatibility_tables(args.tables)
    engine = RatingEngine(tables)
    wardrobe = build_wardrobe(tables, args.wardrobe_size, rng)

    print("=" * 65)
    print("  RATING ENGINE BENCHMARK")
    print("=" * 65)
    print(f"  Tables:    {tables.version}")
    print(f"  Rounds:    {args.rounds}")
    print(f"  Wardrobe:  {len(wardrobe)} garments")
    print("=" * 65)

    rate_times = []
    alt_times = []
    scores = []
    for _ in range(args.rounds):
        outfit = random_outfit(wardrobe, rng)

        t0 = time.perf_counter()
        rating = engine.rate(outfit)
        rate_times.append((time.perf_counter() - t0) * 1000)
        scores.append(rating.score)

        t0 = time.perf_counter()
        engine.find_alternatives(outfit, rating, wardrobe)
        alt_times.append((time.perf_counter() - t0) * 1000)

    print(f"\n  {'Operation':<14} {'Mean':>10} {'P50':>10} {'P95':>10} {'Max':>10}  N")
    print(f"  {'─' * 60}")
    summarize("rate", rate_times)
    summarize("alternatives", alt_times)
    print(f"\n  Score mean {statistics.mean(scores):.2f}, min {min(scores):.1f}, max {max(scores):.1f}")


if __name__ == "__main__":
    main()
