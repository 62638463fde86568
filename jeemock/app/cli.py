from __future__ import annotations

"""CLI for jeemock using SessionManager and the bundled question bank."""

import argparse
import sys
from pathlib import Path
from typing import Callable, Optional

from ..analytics import AnalyticsConfig, ewma_by_session, load_and_prepare, weak_chapters
from ..config.config import load_config, validate_config
from ..errors import ConfigurationError, HistoryWriteError
from ..models import QuestionType, Subject, TestConfig
from ..results.persist import HistoryStore
from ..samplers.question_sampler import BankSampler, SamplerConfig
from ..session.engine import ExamSession
from ..stats.stats import format_summary, share_text, write_report
from ..storage.store import DATA_FILE, export_ndjson, load_all, query_trend
from ..util.logging_config import setup_logging
from ..util.randomness import seed_if_needed
from . import presets
from .session_manager import SessionManager
from .ticker import ThreadTicker

HELP = """Commands:
  a | b | c | d      select an option (MCQ)
  ans <value>        enter a numerical answer (empty clears it)
  mark               toggle mark for review
  clear              clear the response
  n | next           next question
  p | prev           previous question
  goto <n>           jump to question n (1-based)
  tab <subject>      first question of Physics / Chemistry / Mathematics
  palette            show the question palette
  time               show the remaining time
  submit             finish the test
  help               show this help"""

_LETTERS = "abcd"
_STATUS_MARK = {
    "not_visited": " ",
    "not_answered": "x",
    "answered": "*",
    "marked": "?",
    "answered_marked": "!",
}


def _render_question(session: ExamSession, inform: Callable[[str], None]) -> None:
    q = session.current_question
    r = session.current_response
    inform(
        f"\n[{session.current_index + 1}/{len(session.questions)}] {q.subject.value} · {q.chapter} · {q.year}"
        f"   ({session.remaining_clock} left)"
    )
    inform(q.text)
    if q.type is QuestionType.MCQ and q.options:
        for i, opt in enumerate(q.options):
            chosen = "(•)" if r.selected_option == str(i) else "( )"
            inform(f"  {chosen} {_LETTERS[i] if i < len(_LETTERS) else i}. {opt}")
    else:
        inform(f"  answer: {r.selected_option if r.selected_option is not None else '-'}")
    inform(f"  status: {r.status.value}")


def _render_palette(session: ExamSession, inform: Callable[[str], None]) -> None:
    for subject in session.subjects():
        cells = [
            f"{e.index + 1}{_STATUS_MARK[e.status.value]}{'<' if e.current else ''}"
            for e in session.palette(subject)
        ]
        inform(f"{subject.value:12s} {' '.join(cells)}")
    counts = session.status_counts()
    inform("  " + ", ".join(f"{s.value}: {n}" for s, n in counts.items()))


def _handle(session: ExamSession, line: str, inform: Callable[[str], None]) -> bool:
    """Apply one console command. Returns True when the user submits."""
    cmd, _, arg = line.strip().partition(" ")
    cmd = cmd.lower()
    q = session.current_question
    if cmd == "submit":
        return True
    if cmd in _LETTERS and len(cmd) == 1:
        if q.type is not QuestionType.MCQ or not q.options or _LETTERS.index(cmd) >= len(q.options):
            inform("No such option for this question.")
        else:
            session.select_option(str(_LETTERS.index(cmd)))
    elif cmd == "ans":
        if q.type is not QuestionType.NUMERICAL:
            inform("This is an MCQ; pick an option letter.")
        else:
            session.enter_numerical(arg.strip())
    elif cmd == "mark":
        session.toggle_mark()
    elif cmd == "clear":
        session.clear_response()
    elif cmd in ("n", "next"):
        session.next()
    elif cmd in ("p", "prev"):
        session.previous()
    elif cmd == "goto":
        try:
            target = int(arg) - 1
        except ValueError:
            target = -1
        if not session.navigate_to(target):
            inform(f"No question {arg.strip()!r}.")
    elif cmd == "tab":
        try:
            subject = Subject.parse(arg)
        except ValueError:
            inform(f"Unknown subject {arg.strip()!r}.")
        else:
            if not session.switch_subject(subject):
                inform(f"No {subject.value} questions in this test.")
    elif cmd == "palette":
        _render_palette(session, inform)
        return False
    elif cmd == "time":
        inform(f"{session.remaining_clock} left")
        return False
    elif cmd in ("help", "?"):
        inform(HELP)
        return False
    elif cmd:
        inform("Unknown command. Type 'help'.")
        return False
    _render_question(session, inform)
    return False


def run_console(
    sm: SessionManager,
    config: TestConfig,
    *,
    ticker_interval_s: float = 1.0,
    preset: Optional[str] = None,
    ask: Callable[[str], str] = input,
    inform: Callable[[str], None] = print,
) -> int:
    session = sm.start(config, ticker=ThreadTicker(ticker_interval_s), preset=preset)
    inform(f"Test started: {len(session.questions)} questions, {config.duration_minutes} minutes. Type 'help'.")
    _render_question(session, inform)
    abandoned = False
    try:
        while not session.is_finished:
            try:
                line = ask("> ")
            except EOFError:
                abandoned = not session.is_finished
                break
            if session.is_finished:
                inform("Time is up.")
                break
            if _handle(session, line, inform):
                break
    finally:
        session.close()

    if abandoned:
        inform("Input closed; test abandoned and not scored.")
        return 1
    try:
        report = sm.submit()
    except HistoryWriteError as exc:
        inform(f"WARNING: {exc}")
        report = sm.report
    if report is None:
        return 1
    inform("\nResult:")
    inform(format_summary(report))
    inform("")
    inform(share_text(report))
    return 0


def _test_config(args: argparse.Namespace, cfg: dict) -> TestConfig:
    subjects = [Subject.parse(s) for s in args.subjects.split(",")] if args.subjects else None
    chapters = [c.strip() for c in args.chapters.split(",") if c.strip()] if args.chapters else None
    if args.preset:
        tc = presets.from_preset(args.preset, subjects=subjects, chapters=chapters)
    else:
        tc = presets.from_settings(cfg)
        if subjects:
            tc.subjects = subjects
            tc.question_count = int(cfg["exam"]["questions_per_subject"]) * len(subjects)
        if chapters is not None:
            tc.chapters = chapters
    if args.duration is not None:
        if args.duration <= 0:
            raise ConfigurationError(f"--duration must be positive, got {args.duration}")
        tc.duration_minutes = args.duration
    return tc


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(prog="jeemock")
    p.add_argument("--log-level", default="WARNING")
    sub = p.add_subparsers(dest="cmd", required=True)

    sub.add_parser("presets")

    rp = sub.add_parser("run")
    rp.add_argument("--config", default=None)
    rp.add_argument("--preset", choices=presets.preset_names(), default=None)
    rp.add_argument("--subjects", default=None, help="Comma-separated, e.g. Physics,Maths")
    rp.add_argument("--chapters", default=None, help="Comma-separated chapter names; omit for full syllabus")
    rp.add_argument("--duration", type=int, default=None, help="Minutes; overrides the preset")
    rp.add_argument("--bank", default=None, help="YAML/JSON question bank")
    rp.add_argument("--seed", type=int, default=None)
    rp.add_argument("--report", default=None, help="Write the result report as JSON")
    rp.add_argument("--no-stats", action="store_true", help="Do not write attempt stats")
    rp.add_argument("--explain", action="store_true")

    hp = sub.add_parser("history")
    hp.add_argument("--config", default=None)
    hp.add_argument("--clear", action="store_true")
    hp.add_argument("--limit", type=int, default=None)

    tp = sub.add_parser("trend")
    tp.add_argument("--config", default=None)
    tp.add_argument("--subject", default=None)
    tp.add_argument("--span", type=int, default=None, help="EWMA span in sessions")
    tp.add_argument("--export", default=None, help="Write the trend as NDJSON")

    args = p.parse_args(argv)
    setup_logging(args.log_level)

    if args.cmd == "presets":
        for name in presets.preset_names():
            print(presets.describe(name))
        return 0

    try:
        cfg = validate_config(load_config(args.config))
    except ConfigurationError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    if args.cmd == "run":
        seed_if_needed()
        if args.explain:
            from .explain import enable as explain_enable
            explain_enable(True)
        if args.no_stats:
            cfg["stats"]["disable"] = True
        try:
            tc = _test_config(args, cfg)
            sampler = BankSampler.from_file(args.bank or cfg["bank"]["path"], SamplerConfig(rng_seed=args.seed))
            sm = SessionManager(cfg, sampler)
            rc = run_console(sm, tc, ticker_interval_s=cfg["ticker"]["interval_s"], preset=args.preset)
        except (ConfigurationError, ValueError, OSError) as exc:
            print(f"ERROR: {exc}", file=sys.stderr)
            return 1
        if args.report and sm.report is not None:
            write_report(sm.report, args.report)
        return rc

    if args.cmd == "history":
        store = HistoryStore(cfg["history"]["path"], cfg["history"]["max_entries"])
        if args.clear:
            try:
                store.clear()
            except HistoryWriteError as exc:
                print(f"ERROR: {exc}", file=sys.stderr)
                return 1
            print("History cleared.")
            return 0
        entries = store.load()
        if args.limit is not None:
            entries = entries[: max(0, args.limit)]
        if not entries:
            print("No tests taken yet.")
            return 0
        for e in entries:
            print(
                f"{e.date}  {e.score:>4}/{e.max_score:<4} {e.accuracy:>3}%  "
                f"{e.topics:<14} {e.config.duration_minutes}m  {e.verdict or ''}"
            )
        return 0

    if args.cmd == "trend":
        data_dir = Path(cfg["stats"]["data_dir"])
        if not (data_dir / DATA_FILE).exists():
            print("No attempt data yet.")
            return 0
        acfg = AnalyticsConfig(smoothing_span=args.span) if args.span else AnalyticsConfig()
        try:
            subject = Subject.parse(args.subject).value if args.subject else None
        except ValueError as exc:
            print(f"ERROR: {exc}", file=sys.stderr)
            return 1

        per_subject = load_and_prepare(data_dir / DATA_FILE)
        if subject is not None:
            per_subject = per_subject[per_subject["subject"].astype("string") == subject]
        if per_subject.empty:
            print("No attempt data for this subject.")
            return 0
        smooth = ewma_by_session(per_subject, "acc", acfg.smoothing_span, group_cols=["subject"])
        print("session  subject       acc    smoothed  mean time")
        for row in smooth.itertuples(index=False):
            print(
                f"{row.session_idx + 1:>7}  {str(row.subject):12s} {row.acc * 100:5.1f}%  "
                f"{row.acc_smooth * 100:6.1f}%  {row.time_mean_s:6.1f}s"
            )

        attempts = load_all(data_dir)
        weak = weak_chapters(attempts, min_attempts=acfg.min_attempts, top_n=acfg.top_n)
        if not weak.empty:
            print("\nWeakest chapters:")
            for row in weak.itertuples(index=False):
                print(f"  {row.chapter} ({row.subject}): {row.correct}/{row.attempted} correct")

        if args.export:
            export_ndjson(query_trend(attempts, subject=subject), Path(args.export))
            print(f"Trend written to {args.export}")
        return 0

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
