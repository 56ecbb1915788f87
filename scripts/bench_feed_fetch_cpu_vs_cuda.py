"""
scripts/bench_feed_fetch_cpu_vs_cuda.py

CPU vs CUDA feed/fetch microbenchmark (NOT a unit test) for KeyBridge.

Benchmarks the tensor bridge round trip:
- feed_blob(blob, array, DeviceOption)   (host -> tensor storage)
- fetch_blob(blob)                        (tensor storage -> new host array)

Timing policy
-------------
- Feed and fetch are timed separately.
- Uses warmup iterations before timed repeats.
- CUDA cases are skipped (with a message) when the native library cannot be
  loaded.

Usage
-----
python scripts/bench_feed_fetch_cpu_vs_cuda.py --presets --sanity
python scripts/bench_feed_fetch_cpu_vs_cuda.py --shape 64 3 224 224 --dtype float32
"""

from __future__ import annotations

import argparse
import logging
import os
import statistics
import sys
import time
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

import numpy as np

# -------------------------
# Make repo_root/src importable
# -------------------------
THIS_DIR = os.path.dirname(os.path.abspath(__file__))
ROOT_DIR = os.path.abspath(os.path.join(THIS_DIR, ".."))
SRC_DIR = os.path.join(ROOT_DIR, "src")
if SRC_DIR not in sys.path:
    sys.path.insert(0, SRC_DIR)

from keybridge.domain.device._device_option import DeviceOption
from keybridge.infrastructure._logging import setup_logging
from keybridge.infrastructure.bridge import feed_blob, fetch_blob
from keybridge.infrastructure.native_cuda.python.cuda_runtime_ctypes import (
    load_cuda_runtime,
)
from keybridge.infrastructure.tensor._blob import Blob

logger = logging.getLogger("bench_feed_fetch")


def _median(xs: list[float]) -> float:
    return statistics.median(xs)


def _fmt_seconds(x: float) -> str:
    if x < 1e-6:
        return f"{x*1e9:.2f} ns"
    if x < 1e-3:
        return f"{x*1e6:.2f} us"
    if x < 1:
        return f"{x*1e3:.2f} ms"
    return f"{x:.3f} s"


def _fmt_bandwidth(nbytes: int, seconds: float) -> str:
    if seconds <= 0:
        return "inf"
    return f"{nbytes / seconds / 1e9:.2f} GB/s"


def _time_one(fn: Callable[[], None], *, warmup: int, repeats: int) -> list[float]:
    for _ in range(warmup):
        fn()
    ts: list[float] = []
    for _ in range(repeats):
        t0 = time.perf_counter()
        fn()
        t1 = time.perf_counter()
        ts.append(t1 - t0)
    return ts


def _cuda_available() -> Optional[str]:
    """Return None if the CUDA runtime loads, otherwise the reason it does not."""
    try:
        load_cuda_runtime()
    except OSError as e:
        return str(e)
    return None


@dataclass(frozen=True)
class Case:
    name: str
    shape: Tuple[int, ...]


def bench_case(
    c: Case,
    *,
    option: DeviceOption,
    dtype: np.dtype,
    warmup: int,
    repeats: int,
    sanity: bool,
    seed: int,
) -> Tuple[float, float]:
    rng = np.random.default_rng(seed)
    x = rng.standard_normal(c.shape).astype(dtype, copy=False)
    blob = Blob()

    def feed() -> None:
        feed_blob(blob, x, option)

    def fetch() -> None:
        _ = fetch_blob(blob)

    feed()
    if sanity:
        np.testing.assert_array_equal(fetch_blob(blob), x)

    t_feed = _median(_time_one(feed, warmup=warmup, repeats=repeats))
    t_fetch = _median(_time_one(fetch, warmup=warmup, repeats=repeats))
    return t_feed, t_fetch


def main() -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument("--shape", type=int, nargs="+", default=[32, 3, 224, 224])
    ap.add_argument("--dtype", choices=["float32", "float64", "int64"], default="float32")
    ap.add_argument("--warmup", type=int, default=5)
    ap.add_argument("--repeats", type=int, default=20)
    ap.add_argument("--presets", action="store_true")
    ap.add_argument("--sanity", action="store_true")
    ap.add_argument("--seed", type=int, default=0)
    ap.add_argument("--device", type=int, default=0, help="CUDA device ordinal")
    ap.add_argument("--log-level", default=None)
    args = ap.parse_args()

    setup_logging(args.log_level)
    dtype = np.dtype(args.dtype)

    if args.presets:
        cases = [
            Case("vector-1M", (1 << 20,)),
            Case("image-batch", (32, 3, 224, 224)),
            Case("feature-map", (8, 256, 56, 56)),
            Case("tiny", (4, 4)),
        ]
    else:
        cases = [Case("custom", tuple(int(d) for d in args.shape))]

    cuda_reason = _cuda_available()
    if cuda_reason is not None:
        logger.warning("CUDA cases skipped: %s", cuda_reason)

    print("\n" + "=" * 110)
    print(
        f"Feed/fetch CPU vs CUDA benchmark | dtype={dtype} "
        f"(warmup={args.warmup}, repeats={args.repeats}, device={args.device}, "
        f"sanity={args.sanity})"
    )
    print("=" * 110)

    for c in cases:
        nbytes = int(np.prod(c.shape)) * dtype.itemsize
        cpu_feed, cpu_fetch = bench_case(
            c,
            option=DeviceOption.cpu(),
            dtype=dtype,
            warmup=args.warmup,
            repeats=args.repeats,
            sanity=args.sanity,
            seed=args.seed,
        )
        line = (
            f"{c.name:>12} shape={c.shape} | "
            f"cpu feed={_fmt_seconds(cpu_feed):>10} ({_fmt_bandwidth(nbytes, cpu_feed)}) "
            f"fetch={_fmt_seconds(cpu_fetch):>10} ({_fmt_bandwidth(nbytes, cpu_fetch)})"
        )
        if cuda_reason is None:
            cuda_feed, cuda_fetch = bench_case(
                c,
                option=DeviceOption.cuda(args.device),
                dtype=dtype,
                warmup=args.warmup,
                repeats=args.repeats,
                sanity=args.sanity,
                seed=args.seed,
            )
            line += (
                f" | cuda feed={_fmt_seconds(cuda_feed):>10} "
                f"({_fmt_bandwidth(nbytes, cuda_feed)}) "
                f"fetch={_fmt_seconds(cuda_fetch):>10} "
                f"({_fmt_bandwidth(nbytes, cuda_fetch)})"
            )
        print(line)


if __name__ == "__main__":
    main()
