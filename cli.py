"""Simple CLI: send one chat message through the handler.

Usage examples:
- Anonymous message (no goals):
  python cli.py "I'm feeling anxious"

- With a user's goals loaded from Supabase:
  python cli.py "I'm feeling anxious" --user-id 7f7c...

- Pretty print:
  python cli.py "hi" --pretty

Notes:
- Reads GEMINI_API_KEY, SUPABASE_URL, SUPABASE_SERVICE_ROLE_KEY from the environment.
- This CLI does not manage multi-turn chat. It is strictly a single call executor.
"""
import argparse
import json
import sys

from src.companion.config import load_config
from src.companion.errors import CompanionError
from src.companion.handler import ChatHandler
from src.companion.logging_util import get_logger

logger = get_logger(__name__)

def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("message", help="Chat message to send")
    ap.add_argument("--user-id", default=None, help="User id whose goals personalize the reply")
    ap.add_argument("--pretty", action="store_true", help="Pretty print the output JSON")
    args = ap.parse_args()

    try:
        config = load_config()
    except CompanionError as e:
        logger.error("Invalid configuration: %s", e)
        sys.exit(2)

    body = {"message": args.message}
    if args.user_id:
        body["userId"] = args.user_id

    resp = ChatHandler(config).handle("POST", body, request_id="CLI")
    out = {"status": resp.status_code, "body": resp.json_body()}

    if args.pretty:
        print(json.dumps(out, ensure_ascii=False, indent=2))
    else:
        print(json.dumps(out, ensure_ascii=False))

    sys.exit(0 if resp.status_code == 200 else 1)

if __name__ == "__main__":
    main()
