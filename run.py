"""Replay a scenario file through the chat handler.

Usage examples:
- Stop at the first failing case:
  python run.py cases/sample.json

- Keep going and write the JSONL somewhere else:
  python run.py cases/sample.json --continue --output-dir /tmp/companion-runs

Notes:
- Reads the same environment and YAML settings as lambda_function.py.
- Exit code is 0 when every case answered 200, 1 otherwise, 2 on bad arguments.
"""
from src.companion.runner import main

if __name__ == "__main__":
    raise SystemExit(main())
