#!/usr/bin/env python3
"""Benchmark incremental keyword-index updates against full rebuilds.

Usage:
    # Synthetic documents of 1k, 10k and 100k lines:
    python benchmarks/benchmark.py

    # Your own Markdown files:
    python benchmarks/benchmark.py notes.md todo.md

For every document the script builds the index once, then replays a fixed,
seeded sequence of edits (typing on a line, pasting a block, deleting a
block) and times the incremental update and a full rebuild after each edit.
"""

import os
import random
import sys
import time
import tracemalloc

from markdown_todo.annotation_index import AnnotationIndex
from markdown_todo.keywords import KeywordSet
from markdown_todo.models import TextChange
from markdown_todo.text_source import LineBuffer


DEFAULT_SIZES = [1_000, 10_000, 100_000]
EDITS_PER_DOCUMENT = 200

_LINE_KINDS = [
    "# TODO heading {n}",
    "## DONE heading {n}",
    "- TODO item {n}",
    "  * DONE nested item {n}",
    "- plain item {n}",
    "Body text for paragraph {n}.",
    "",
]


def synthetic_document(line_count, seed=0):
    """Markdown text with a mix of keyword lines, list items and prose."""
    rng = random.Random(seed)
    return "\n".join(rng.choice(_LINE_KINDS).format(n=n) for n in range(line_count))


def random_edit(rng, buffer):
    """One realistic edit: a keystroke, a pasted block, or a deleted block."""
    last = buffer.line_count() - 1
    kind = rng.choice(["type", "paste", "delete"])
    line = rng.randint(0, last)
    if kind == "type":
        column = rng.randint(0, len(buffer.line_text(line)))
        return TextChange(line, line, rng.choice(["x", " ", "TODO "]), column, column)
    if kind == "paste":
        block = "\n".join(rng.choice(_LINE_KINDS).format(n=i) for i in range(rng.randint(1, 20)))
        return TextChange(line, line, block + "\n", 0, 0)
    end = min(last, line + rng.randint(0, 10))
    return TextChange(line, end, "")


def measure_document(name, text):
    """Build the index for text and time incremental updates vs rebuilds."""
    print(f"\n{'='*60}")
    print(f"  Benchmarking: {name}")
    print(f"{'='*60}")

    keyword_set = KeywordSet.default()
    buffer = LineBuffer(text)

    tracemalloc.start()
    start = time.perf_counter()
    index = AnnotationIndex.build_full(buffer, keyword_set)
    build_elapsed = time.perf_counter() - start
    _, peak_mem = tracemalloc.get_traced_memory()
    tracemalloc.stop()

    rng = random.Random(42)
    incremental_total = 0.0
    rebuild_total = 0.0
    for _ in range(EDITS_PER_DOCUMENT):
        change = random_edit(rng, buffer)
        edit = buffer.apply_change(change)

        start = time.perf_counter()
        index.update(edit, buffer)
        incremental_total += time.perf_counter() - start

        start = time.perf_counter()
        rebuilt = AnnotationIndex.build_full(buffer, keyword_set)
        rebuild_total += time.perf_counter() - start

        if rebuilt.spans != index.spans:
            raise AssertionError(f"Incremental index diverged from rebuild on {name}")

    stats = {
        "name": name,
        "lines": buffer.line_count(),
        "annotations": len(index),
        "build_time_ms": round(build_elapsed * 1000, 2),
        "peak_memory_mb": round(peak_mem / 1024 / 1024, 2),
        "incremental_us": round(incremental_total / EDITS_PER_DOCUMENT * 1e6, 1),
        "rebuild_us": round(rebuild_total / EDITS_PER_DOCUMENT * 1e6, 1),
    }

    print(f"\n  Lines: {stats['lines']:,}")
    print(f"  Annotations: {stats['annotations']:,}")
    print(f"  Full build: {stats['build_time_ms']}ms")
    print(f"  Peak memory: {stats['peak_memory_mb']} MB")
    print(f"  Incremental update (mean): {stats['incremental_us']}us")
    print(f"  Full rebuild (mean): {stats['rebuild_us']}us")

    return stats


def print_summary(all_stats):
    """Print a markdown-formatted summary table."""
    print(f"\n\n{'='*80}")
    print("  BENCHMARK RESULTS")
    print(f"{'='*80}\n")

    print("| Document | Lines | Annotations | Full Build | Incremental | Rebuild | Speedup |")
    print("|----------|------:|------------:|-----------:|------------:|--------:|--------:|")
    for s in all_stats:
        speedup = s["rebuild_us"] / s["incremental_us"] if s["incremental_us"] else 0
        print(
            f"| {s['name']} | {s['lines']:,} | {s['annotations']:,} | {s['build_time_ms']}ms "
            f"| {s['incremental_us']}us | {s['rebuild_us']}us | {speedup:.0f}x |"
        )


def main():
    all_stats = []

    if len(sys.argv) > 1:
        documents = []
        for path in sys.argv[1:]:
            path = os.path.abspath(path)
            if not os.path.isfile(path):
                print(f"\nSkipping {path} — file not found")
                continue
            documents.append((os.path.basename(path), LineBuffer.from_file(path).get_text()))
    else:
        documents = [(f"synthetic-{n:,}", synthetic_document(n)) for n in DEFAULT_SIZES]

    for name, text in documents:
        all_stats.append(measure_document(name, text))

    if all_stats:
        print_summary(all_stats)


if __name__ == "__main__":
    main()
