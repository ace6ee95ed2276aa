from __future__ import annotations

"""Attempt-history stats: DataFrame view, summary, formatting and export."""

from pathlib import Path
from typing import Dict, List, Sequence

import pandas as pd

from ..storage.schema import DTYPES, AttemptRecord


def history_frame(history: Sequence[AttemptRecord]) -> pd.DataFrame:
    """History as a typed DataFrame, one row per attempt in insertion order."""
    if not history:
        return pd.DataFrame({k: pd.Series(dtype=v) for k, v in DTYPES.items()})
    df = pd.DataFrame([r.model_dump() for r in history])
    for col, dt in DTYPES.items():
        df[col] = df[col].astype(dt)
    return df[list(DTYPES.keys())]


def summarize(history: Sequence[AttemptRecord]) -> Dict:
    df = history_frame(history)
    total = int(len(df))
    if total == 0:
        return {"total": 0, "correct": 0, "wrong": 0, "accuracy": 0.0, "best_streak": 0, "net": 0}
    correct_s = df["correct"].fillna(False).astype(bool)
    correct = int(correct_s.sum())
    wrong = total - correct
    # each wrong answer starts a new run; count the correct answers in each run
    runs = correct_s.groupby((~correct_s).cumsum()).sum()
    return {
        "total": total,
        "correct": correct,
        "wrong": wrong,
        "accuracy": round(correct / total, 4),
        "best_streak": int(runs.max()),
        "net": correct - wrong,
    }


def format_summary(summary: Dict) -> str:
    """Return a human-readable summary."""
    total = int(summary.get("total", 0))
    correct = int(summary.get("correct", 0))
    lines = [f"Total: {correct}/{total} correct"]
    if total:
        lines.append(f"Accuracy: {float(summary.get('accuracy', 0.0)) * 100:.1f}%")
        lines.append(f"Best streak: {int(summary.get('best_streak', 0))}")
        lines.append(f"Net: {int(summary.get('net', 0)):+d}")
    return "\n".join(lines)


def format_history(history: Sequence[AttemptRecord], limit: int | None = None) -> List[str]:
    """One line per attempt, newest last, e.g. `3 + 4 = 7  Correct`."""
    items = list(history)
    if limit is not None:
        items = items[-limit:] if limit > 0 else []
    return [f"{r.q} = {r.a}  {'Correct' if r.correct else 'Wrong'}" for r in items]


def export_history(history: Sequence[AttemptRecord], out_path: str | Path) -> Path:
    """Write history to .parquet (pyarrow) or .ndjson."""
    out = Path(out_path)
    suffix = out.suffix.lower()
    if suffix not in (".parquet", ".ndjson"):
        raise ValueError(f"Unsupported export format: {out.suffix or out.name}")
    out.parent.mkdir(parents=True, exist_ok=True)
    df = history_frame(history)
    if suffix == ".parquet":
        df.to_parquet(out, engine="pyarrow", compression="zstd", index=False)
    else:
        df.to_json(out, orient="records", lines=True)
    return out
