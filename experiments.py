"""
Huffman code-table experiments

Measures how close the derived codes get to the Shannon entropy bound and how
long each stage of the table construction takes, on synthetic byte data

Outputs (in --outdir):
  - metrics.csv     (raw row per run per dataset)
  - summary.csv     (grouped mean/stdev)
  - *.png           (charts)

How to run:
  python experiments.py --outdir results --runs 5
  python experiments.py --outdir results --runs 3 --exp1_size_kb 256 --exp2_max_kb 4096
  python experiments.py --outdir results --exp1_generators uniform256,zipf64,english_like --no_exp2
"""

from __future__ import annotations

import argparse
import bisect
import csv
import itertools
import math
import random
import statistics
import time
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Callable, Dict, List, Tuple

import matplotlib.pyplot as plt

import huffman as huff


# Utilities

def now_ns() -> int:
    return time.perf_counter_ns()

def ns_to_ms(ns: int) -> float:
    return ns / 1_000_000.0

def safe_mkdir(p: Path) -> None:
    p.mkdir(parents=True, exist_ok=True)

def shannon_entropy(ft: Dict[int, int]) -> float:
    """
    Entropy in bits per symbol of the empirical distribution in ft
    """
    total = sum(ft.values())
    if total == 0:
        return 0.0
    return -sum((c / total) * math.log2(c / total) for c in ft.values() if c > 0)

def _ensure_nonempty_code_map(code_map: Dict[int, str]) -> Dict[int, str]:
    # Edge case of file with one unique symbol -> Huffman code is empty
    # Count it as 1 bit so the encoded size is not reported as zero
    if len(code_map) == 1:
        k = next(iter(code_map))
        if code_map[k] == "":
            return {k: "0"}
    return code_map


# Synthetic datasets
# Each profile returns (symbols, weights), all are sampled the same way

Profile = Tuple[List[int], List[float]]

def uniform_profile(alphabet: int) -> Profile:
    return list(range(alphabet)), [1.0] * alphabet

def zipf_profile(alphabet: int, s: float = 1.2) -> Profile:
    return list(range(alphabet)), [1.0 / (rank ** s) for rank in range(1, alphabet + 1)]

def dominant_profile(dominant: int, share: float) -> Profile:
    # one byte takes `share` of the mass, the other 255 split the rest evenly
    weights = [(1.0 - share) / 255] * 256
    weights[dominant] = share
    return list(range(256)), weights

ENGLISH_CHARS = " etaoinshrdlcumwfgypbvkjxqETAOINSHRDLCUMWFGYPBVKJXQ\n"
ENGLISH_TIERS = ((" ", 13.0), ("\n", 1.5), ("etaoinshrdlu", 6.0), ("cmfwgypbvk", 2.5))

def english_profile() -> Profile:
    weights = []
    for ch in ENGLISH_CHARS:
        weight = 1.2
        for group, w in ENGLISH_TIERS:
            if ch.lower() in group:
                weight = w
                break
        weights.append(weight)
    return [ord(ch) for ch in ENGLISH_CHARS], weights

PROFILES: Dict[str, Callable[[], Profile]] = {
    "uniform256": lambda: uniform_profile(256),
    "zipf128": lambda: zipf_profile(128),
    "zipf64": lambda: zipf_profile(64),
    "repetitive90": lambda: dominant_profile(ord('A'), 0.90),
    "english_like": english_profile,
}

def sample_bytes(profile: Profile, size: int, seed: int = 0) -> bytes:
    symbols, weights = profile
    rng = random.Random(seed)
    cdf = list(itertools.accumulate(weights))
    total = cdf[-1]
    # bisect over the cumulative weights, clamped against float round-off at the top
    last = len(cdf) - 1
    return bytes(symbols[min(bisect.bisect_left(cdf, rng.random() * total), last)] for _ in range(size))

def generate_dataset(name: str, size_bytes: int, seed: int) -> Tuple[str, bytes]:
    """
    Unknown dataset names fall back to uniform256, labelled as such,
    so one typo does not abort a long run
    """
    make = PROFILES.get(name)
    if make is None:
        return f"{name}_fallback_uniform256", sample_bytes(uniform_profile(256), size_bytes, seed)
    return name, sample_bytes(make(), size_bytes, seed)


# Experiment runner

@dataclass
class MetricRow:
    exp_name: str
    dataset_name: str
    file_size_bytes: int
    run_id: int
    unique_symbols: int

    count_ms: float
    build_tree_ms: float
    table_ms: float
    total_ms: float

    entropy_bits: float  # bits/symbol lower bound
    avg_code_length: float  # bits/symbol achieved
    efficiency: float  # entropy / avg_code_length
    max_code_length: int
    tree_height: int
    encoded_bits: int
    prefix_free_ok: int  # 1 or 0


def run_one(data: bytes) -> MetricRow:
    t0 = now_ns()
    ft = huff.count_frequency(data)
    t1 = now_ns()
    root = huff.build_tree(huff.build_forest(ft))
    t2 = now_ns()
    code_map = huff.create_encoding_table(root)
    t3 = now_ns()

    prefix_free_ok = 1 if huff.is_prefix_free(code_map) else 0
    code_map = _ensure_nonempty_code_map(code_map)

    encoded_bits = huff.weighted_code_length(code_map, ft)
    avg_len = encoded_bits / len(data)
    entropy = shannon_entropy(ft)
    lengths = huff.code_lengths(code_map)

    return MetricRow(
        exp_name="",
        dataset_name="",
        file_size_bytes=len(data),
        run_id=0,
        unique_symbols=len(ft),
        count_ms=ns_to_ms(t1 - t0),
        build_tree_ms=ns_to_ms(t2 - t1),
        table_ms=ns_to_ms(t3 - t2),
        total_ms=ns_to_ms(t3 - t0),
        entropy_bits=entropy,
        avg_code_length=avg_len,
        efficiency=entropy / avg_len,
        max_code_length=max(lengths.values()),
        tree_height=huff.tree_height(root),
        encoded_bits=encoded_bits,
        prefix_free_ok=prefix_free_ok,
    )


def write_csv(path: Path, rows: List[MetricRow]) -> None:
    names = [f.name for f in fields(MetricRow)]
    with path.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=names)
        w.writeheader()
        for r in rows:
            w.writerow({k: getattr(r, k) for k in names})


SUMMARY_METRICS = ("avg_code_length", "entropy_bits", "efficiency", "build_tree_ms", "table_ms", "total_ms")

def mean_stdev(vals: List[float]) -> Tuple[float, float]:
    if len(vals) == 1:
        return vals[0], 0.0
    return statistics.mean(vals), statistics.stdev(vals)

def group_summary(rows: List[MetricRow], out_path: Path) -> None:
    """
    Group by exp_name, dataset_name, file_size_bytes and compute mean/stdev
    """
    key_to: Dict[Tuple[str, str, int], List[MetricRow]] = {}
    for r in rows:
        key_to.setdefault((r.exp_name, r.dataset_name, r.file_size_bytes), []).append(r)

    summary_fields = ["exp_name", "dataset_name", "file_size_bytes", "n_runs"]
    for m in SUMMARY_METRICS:
        summary_fields += [f"{m}_mean", f"{m}_stdev"]
    summary_fields.append("prefix_free_rate")

    with out_path.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=summary_fields)
        w.writeheader()
        for (exp_name, dataset_name, size_b), items in sorted(key_to.items()):
            out = {
                "exp_name": exp_name,
                "dataset_name": dataset_name,
                "file_size_bytes": size_b,
                "n_runs": len(items),
                "prefix_free_rate": sum(x.prefix_free_ok for x in items) / len(items),
            }
            for m in SUMMARY_METRICS:
                out[f"{m}_mean"], out[f"{m}_stdev"] = mean_stdev([getattr(x, m) for x in items])
            w.writerow(out)


# Plotting

def plot_experiment_1(rows: List[MetricRow], outdir: Path) -> None:
    exp_rows = [r for r in rows if r.exp_name == "exp1_distribution"]
    if not exp_rows:
        return

    datasets = sorted(set(r.dataset_name for r in exp_rows))

    def mean_for(dataset: str, field: str) -> float:
        return statistics.mean(getattr(r, field) for r in exp_rows if r.dataset_name == dataset)

    x = list(range(len(datasets)))
    width = 0.4

    plt.figure()
    plt.bar([i - width / 2 for i in x], [mean_for(d, "entropy_bits") for d in datasets], width, label="entropy")
    plt.bar([i + width / 2 for i in x], [mean_for(d, "avg_code_length") for d in datasets], width, label="huffman")
    plt.xticks(x, datasets, rotation=20, ha="right")
    plt.ylabel("Bits per Symbol")
    plt.title("Experiment 1: Average Code Length vs Entropy")
    plt.legend()
    plt.tight_layout()
    plt.savefig(outdir / "exp1_code_length.png", dpi=200)
    plt.close()

    plt.figure()
    plt.plot(x, [mean_for(d, "efficiency") for d in datasets], marker="o")
    plt.xticks(x, datasets, rotation=20, ha="right")
    plt.ylabel("Entropy / Average Code Length")
    plt.title("Experiment 1: Code Efficiency by Distribution")
    plt.tight_layout()
    plt.savefig(outdir / "exp1_efficiency.png", dpi=200)
    plt.close()


def plot_experiment_2(rows: List[MetricRow], outdir: Path) -> None:
    exp_rows = [r for r in rows if r.exp_name == "exp2_size_scaling"]
    if not exp_rows:
        return

    for dist in sorted(set(r.dataset_name for r in exp_rows)):
        dist_rows = [r for r in exp_rows if r.dataset_name == dist]
        sizes = sorted(set(r.file_size_bytes for r in dist_rows))

        def mean_size(size: int, field: str) -> float:
            return statistics.mean(getattr(r, field) for r in dist_rows if r.file_size_bytes == size)

        plt.figure()
        for field, label in (("count_ms", "count"), ("build_tree_ms", "build tree"), ("table_ms", "code table")):
            plt.plot(sizes, [mean_size(s, field) for s in sizes], marker="o", label=label)
        plt.xscale("log", base=2)
        plt.xlabel("File Size (bytes)")
        plt.ylabel("Time (ms)")
        plt.title(f"Experiment 2: Stage Time vs Size ({dist})")
        plt.legend()
        plt.tight_layout()
        plt.savefig(outdir / f"exp2_stage_time_{dist}.png", dpi=200)
        plt.close()

        plt.figure()
        plt.plot(sizes, [mean_size(s, "avg_code_length") for s in sizes], marker="o", label="huffman")
        plt.plot(sizes, [mean_size(s, "entropy_bits") for s in sizes], marker="x", label="entropy")
        plt.xscale("log", base=2)
        plt.xlabel("File Size (bytes)")
        plt.ylabel("Bits per Symbol")
        plt.title(f"Experiment 2: Code Length vs Size ({dist})")
        plt.legend()
        plt.tight_layout()
        plt.savefig(outdir / f"exp2_code_length_{dist}.png", dpi=200)
        plt.close()


# Main

def parse_csv_list(s: str) -> List[str]:
    return [x.strip() for x in s.split(",") if x.strip()]

def size_series(min_bytes: int, max_bytes: int) -> List[int]:
    sizes: List[int] = []
    s = min_bytes
    while s <= max_bytes:
        sizes.append(s)
        s *= 2
    return sizes

def run_experiments(args: argparse.Namespace) -> List[MetricRow]:
    rows: List[MetricRow] = []

    # Experiment 1: distributions (fixed size)
    if not args.no_exp1:
        fixed_size = max(1, args.exp1_size_kb) * 1024
        for gen_name in parse_csv_list(args.exp1_generators):
            for run_id in range(1, args.runs + 1):
                dataset_name, data = generate_dataset(gen_name, fixed_size, args.seed + run_id)
                row = run_one(data)
                row.exp_name = "exp1_distribution"
                row.dataset_name = dataset_name
                row.run_id = run_id
                rows.append(row)

    # Experiment 2: size scaling (powers of 2)
    if not args.no_exp2:
        sizes = size_series(max(1, args.exp2_min_kb) * 1024, max(1, args.exp2_max_kb) * 1024)
        for gen_name in parse_csv_list(args.exp2_generators):
            for size_b in sizes:
                for run_id in range(1, args.runs + 1):
                    dataset_name, data = generate_dataset(gen_name, size_b, args.seed + 10_000 + size_b + run_id)
                    row = run_one(data)
                    row.exp_name = "exp2_size_scaling"
                    row.dataset_name = dataset_name
                    row.run_id = run_id
                    rows.append(row)

    return rows

def build_parser() -> argparse.ArgumentParser:
    known = ", ".join(PROFILES)
    ap = argparse.ArgumentParser(description="Huffman code-table experiments")
    ap.add_argument("--outdir", type=str, default="results", help="Where metrics.csv, summary.csv and charts go")
    ap.add_argument("--runs", type=int, default=5, help="Runs per dataset and size")
    ap.add_argument("--seed", type=int, default=123, help="Base random seed")

    dist = ap.add_argument_group("exp1: code length by distribution")
    dist.add_argument("--no_exp1", action="store_true", help="Skip this experiment")
    dist.add_argument("--exp1_size_kb", type=int, default=512, help="Message size in KB")
    dist.add_argument("--exp1_generators", type=str, default=",".join(PROFILES), help=f"Profiles to run ({known})")

    scaling = ap.add_argument_group("exp2: stage time by message size")
    scaling.add_argument("--no_exp2", action="store_true", help="Skip this experiment")
    scaling.add_argument("--exp2_min_kb", type=int, default=4, help="Smallest size in KB, doubled up to the max")
    scaling.add_argument("--exp2_max_kb", type=int, default=8192, help="Largest size in KB")
    scaling.add_argument("--exp2_generators", type=str, default="uniform256,zipf128,repetitive90",
                         help=f"Profiles to run ({known})")
    return ap

def main(argv: List[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    outdir = Path(args.outdir)
    safe_mkdir(outdir)

    rows = run_experiments(args)

    # Write raw and summary
    metrics_csv = outdir / "metrics.csv"
    summary_csv = outdir / "summary.csv"
    write_csv(metrics_csv, rows)
    group_summary(rows, summary_csv)

    # Plots
    plot_experiment_1(rows, outdir)
    plot_experiment_2(rows, outdir)

    ok_rate = sum(r.prefix_free_ok for r in rows) / max(1, len(rows))
    print(f"Wrote {len(rows)} rows to {metrics_csv}")
    print(f"Wrote grouped summary to {summary_csv}")
    print(f"Prefix-free rate across all runs: {ok_rate:.3f}")
    print("Charts saved in:", outdir.resolve())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
