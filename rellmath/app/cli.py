from __future__ import annotations

"""CLI for RellMath: an interactive terminal front end over SessionState."""

import argparse
import sys
from typing import Any, Callable, Dict, Optional

from .. import __version__
from ..config.config import load_config, validate_config
from ..drills.problem import OPERATOR_SYMBOLS
from ..errors import InvalidConfiguration
from ..stats.stats import export_history, format_history, format_summary, summarize
from ..storage.store import JsonFileStore, PersistenceAdapter, make_store
from ..util.randomness import seed_if_needed
from .events import STATE_CHANGED
from .session_state import SessionState, SessionView

HELP = (
    "Type an answer and press Enter. Commands: "
    ":digits N, :op {" + " ".join(OPERATOR_SYMBOLS) + "}, :reset, :history, :stats, :quit"
)


def _open_store(cfg: Dict[str, Any], store_path: Optional[str]) -> PersistenceAdapter:
    if store_path:
        return JsonFileStore(store_path)
    return make_store(cfg["storage"])


def _start_session(store: PersistenceAdapter, inform: Callable[[str], None]) -> SessionState:
    session = SessionState(store)
    try:
        return session.initialize()
    except InvalidConfiguration as e:
        # A bad persisted digit width must not keep the drill from starting.
        inform(f"[WARN] Stored digit width rejected ({e}); falling back to defaults.")
        return session.initialize(repair=True)


def _build_ui(cfg: Dict[str, Any]) -> Dict[str, Callable]:
    preview = int(cfg["session"]["history_preview"])
    prompt = str(cfg["ui"]["prompt"])

    def ask() -> Optional[str]:
        try:
            return input(prompt)
        except EOFError:
            return None

    def inform(msg: str) -> None:
        print(msg)

    def render(view: SessionView) -> None:
        print(f"\nScore: {view.score}   Digits: {view.digit_width}   Operation: {view.operator.value}")
        for line in format_history(view.history, preview):
            print(f"  {line}")
        print(f"{view.expression} = ?")

    return {"ask": ask, "inform": inform, "render": render}


def _handle_command(session: SessionState, line: str, inform: Callable[[str], None]) -> bool:
    """Apply a `:command`. Returns False when the user asked to quit."""
    parts = line[1:].split()
    cmd = parts[0].lower() if parts else ""
    arg = parts[1] if len(parts) > 1 else ""
    if cmd in ("q", "quit", "exit"):
        return False
    if cmd in ("digits", "digit", "d"):
        try:
            session.change_digit_width(arg)
        except InvalidConfiguration as e:
            inform(f"Rejected: {e}")
    elif cmd in ("op", "operation"):
        if not session.change_operator(arg):
            inform(f"Unknown operation '{arg}'. Choose one of: {' '.join(OPERATOR_SYMBOLS)}")
    elif cmd == "reset":
        session.reset_session()
    elif cmd == "history":
        lines = format_history(session.history)
        inform("\n".join(lines) if lines else "No history yet.")
    elif cmd == "stats":
        inform(format_summary(summarize(session.history)))
    else:
        inform(HELP)
    return True


def run_loop(session: SessionState, ui: Dict[str, Callable]) -> int:
    ask = ui["ask"]
    inform = ui["inform"]
    session.bus.subscribe(STATE_CHANGED, ui["render"])
    inform(HELP)
    ui["render"](session.snapshot())
    try:
        while True:
            line = ask()
            if line is None:
                break
            line = line.strip()
            if line.startswith(":"):
                if not _handle_command(session, line, inform):
                    break
                continue
            record = session.submit_answer(line)
            if record is not None:
                inform("Correct!" if record.correct else "Wrong.")
    finally:
        session.bus.unsubscribe(STATE_CHANGED, ui["render"])
        session.teardown()
    return 0


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(prog="rellmath", description="RellMath arithmetic drill")
    p.add_argument("--version", action="version", version=f"rellmath {__version__}")
    sub = p.add_subparsers(dest="cmd", required=True)

    def common(sp: argparse.ArgumentParser) -> None:
        sp.add_argument("--config", default=None, help="Path to YAML config")
        sp.add_argument("--store", default=None, help="Path to the JSON store (overrides config)")

    rp = sub.add_parser("run", help="Start an interactive drill")
    common(rp)
    rp.add_argument("--digits", type=int, default=None, help="Digit width for this and later sessions")
    rp.add_argument("--op", default=None, choices=OPERATOR_SYMBOLS, help="Operation for this and later sessions")
    rp.add_argument("--explain", action="store_true")

    sc = sub.add_parser("show-config")
    sc.add_argument("--config", default=None)

    hp = sub.add_parser("history")
    common(hp)
    hp.add_argument("--limit", type=int, default=None)

    st = sub.add_parser("stats")
    common(st)
    st.add_argument("--export", default=None, help="Write history to .parquet or .ndjson")

    rs = sub.add_parser("reset", help="Reset score and history")
    common(rs)

    args = p.parse_args(argv)
    cfg = validate_config(load_config(args.config))

    if args.cmd == "show-config":
        for section, values in cfg.items():
            print(f"{section}: {values}")
        return 0

    store = _open_store(cfg, args.store)

    if args.cmd == "run":
        seed_if_needed()
        if args.explain or cfg["explain"]:
            from .explain import enable as explain_enable
            explain_enable(True)
        ui = _build_ui(cfg)
        session = _start_session(store, ui["inform"])
        try:
            if args.digits is not None:
                session.change_digit_width(args.digits)
            if args.op is not None:
                session.change_operator(args.op)
        except InvalidConfiguration as e:
            print(f"ERROR: {e}", file=sys.stderr)
            return 2
        return run_loop(session, ui)

    session = _start_session(store, print)

    if args.cmd == "history":
        lines = format_history(session.history, args.limit)
        print("\n".join(lines) if lines else "No history yet.")
        print()
        print(format_summary(summarize(session.history)))
        return 0

    if args.cmd == "stats":
        print(format_summary(summarize(session.history)))
        if args.export:
            try:
                out = export_history(session.history, args.export)
            except ValueError as e:
                print(f"ERROR: {e}", file=sys.stderr)
                return 2
            print(f"Exported {len(session.history)} attempts to {out}")
        return 0

    if args.cmd == "reset":
        session.reset_session()
        print("Score and history reset.")
        return 0

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
