"""Scenario replay runner.

Case file shape:
{
  "defaults": {"userId": "u1"},
  "cases": [
    {"id": "anxious", "message": "I'm feeling anxious"},
    {"id": "anon", "message": "hello", "userId": ""}
  ]
}

Each case goes through ChatHandler exactly as a browser POST would. The
envelope is pretty-printed and appended to output/chat_{YYYYMMDD_HHMMSS}.jsonl.
"""
from __future__ import annotations

import argparse
import json
import re
import time
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from .config import load_config
from .errors import CompanionError
from .handler import ChatHandler
from .logging_util import get_logger

logger = get_logger(__name__)


# ----------------------------------------------------------------------
# Output (console + file)
# ----------------------------------------------------------------------
def _get_output_path(out_dir: Path, run_ts: str) -> Path:
    out_dir.mkdir(parents=True, exist_ok=True)
    return out_dir / f"chat_{run_ts}.jsonl"


def _append_jsonl(path: Path, obj: Dict[str, Any]) -> None:
    line = json.dumps(obj, ensure_ascii=False)
    with path.open("a", encoding="utf-8", newline="\n") as f:
        f.write(line + "\n")


def _one_line_preview(s: Optional[str], limit: int = 200) -> str:
    if s is None:
        return ""
    t = str(s).replace("\r\n", "\n").replace("\r", "\n")
    t = re.sub(r"\s+", " ", t).strip()
    if len(t) > limit:
        return t[:limit].rstrip() + " ..."
    return t


def _pretty_print(obj: Dict[str, Any]) -> None:
    print(json.dumps(obj, ensure_ascii=False, indent=2))


# ----------------------------------------------------------------------
# Case parsing
# ----------------------------------------------------------------------
def _case_body(defaults: Dict[str, Any], c: Dict[str, Any]) -> Dict[str, Any]:
    def pick(key: str) -> Any:
        return c[key] if key in c else defaults.get(key)

    body: Dict[str, Any] = {"message": pick("message")}
    user_id = pick("userId")
    if user_id:
        body["userId"] = user_id
    return body


# ----------------------------------------------------------------------
# Main runner
# ----------------------------------------------------------------------
def run_case_file(
    case_file: str,
    continue_on_error: bool = False,
    handler: Optional[ChatHandler] = None,
    output_dir: Optional[Path] = None,
) -> List[Dict[str, Any]]:
    case_path = Path(case_file)

    # repo root: ./src/companion/runner.py -> parents[2]
    repo_root = Path(__file__).resolve().parents[2]
    out_dir = output_dir or (repo_root / "output")

    data = json.loads(case_path.read_text(encoding="utf-8"))
    defaults = data.get("defaults") or {}
    cases = data.get("cases") or []
    if not isinstance(cases, list) or not cases:
        raise CompanionError("cases must be a non-empty list")

    handler = handler or ChatHandler(load_config(repo_root))

    run_ts = datetime.now().strftime("%Y%m%d_%H%M%S")
    out_path = _get_output_path(out_dir, run_ts)

    logger.info("CASE FILE: %s", str(case_path))
    logger.info("TOTAL CASES: %d", len(cases))
    logger.info("OUTPUT: %s", str(out_path.resolve()))

    envelopes: List[Dict[str, Any]] = []
    for idx, c in enumerate(cases, start=1):
        case_id = c.get("id") or f"case_{idx:02d}"
        logger.info("------------------------------------------------------------")
        logger.info("[CASE %s] start", case_id)

        t0 = time.perf_counter()
        body = _case_body(defaults, c)
        resp = handler.handle("POST", body, request_id=case_id)
        elapsed_ms = int((time.perf_counter() - t0) * 1000)

        envelope: Dict[str, Any] = {
            "meta": {
                "case_id": case_id,
                "ts": datetime.now().isoformat(timespec="seconds"),
                "elapsed_ms": elapsed_ms,
            },
            "input": body,
            "output": {
                "status": resp.status_code,
                "body": resp.json_body(),
            },
        }

        logger.info(f"[INPUT] {_one_line_preview(body.get('message'), 200)}")
        logger.info(f"[OUTPUT] {_one_line_preview(resp.body, 200)}")

        _pretty_print(envelope)
        _append_jsonl(out_path, envelope)
        envelopes.append(envelope)

        if resp.status_code != 200:
            logger.error("[CASE %s] failed with status %d", case_id, resp.status_code)
            if not continue_on_error:
                raise CompanionError(f"[{case_id}] chat failed: {resp.body}")
        else:
            logger.info("[CASE %s] success", case_id)

    logger.info("DONE")
    return envelopes


def main(argv: Optional[List[str]] = None, handler: Optional[ChatHandler] = None) -> int:
    ap = argparse.ArgumentParser(prog="run.py")
    ap.add_argument("case_file", help="JSON file with defaults and cases")
    ap.add_argument("--continue", dest="cont", action="store_true", help="Run every case even after a failure")
    ap.add_argument("--output-dir", default=None, help="Directory for the chat_*.jsonl output")
    args = ap.parse_args(argv)

    output_dir = Path(args.output_dir) if args.output_dir else None
    try:
        envelopes = run_case_file(args.case_file, continue_on_error=args.cont, handler=handler, output_dir=output_dir)
    except CompanionError as e:
        logger.error("run stopped: %s", e)
        return 1

    failed = [e["meta"]["case_id"] for e in envelopes if e["output"]["status"] != 200]
    if failed:
        logger.error("failed cases: %s", ", ".join(failed))
        return 1
    return 0
