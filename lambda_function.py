"""AWS Lambda entrypoint.

Design goals:
- Keep this file small and stable.
- Delegate all real logic to src/companion so that:
  - The same handler is used from Lambda, the CLI and the scenario runner.
  - Tests can build a ChatHandler with stub collaborators and no environment.

Accepted event shapes:
1) API Gateway REST proxy (body is a JSON string, maybe base64):
   {"httpMethod": "POST", "body": "{\"message\":\"hi\",\"userId\":\"u1\"}"}

2) API Gateway HTTP API v2:
   {"requestContext": {"http": {"method": "OPTIONS"}}, "body": null}

3) Direct invoke / local test (event itself is the JSON body):
   {"message": "hi", "userId": "u1"}

Return:
- statusCode: 200 on success or preflight, 500 on any failure
- headers: CORS headers, always
- body: JSON string of {"response": ...} or {"error": ...}; empty for preflight
"""
import base64
import binascii
from typing import Any, Dict, Optional

from src.companion.config import load_config
from src.companion.errors import CompanionError
from src.companion.handler import ChatHandler, error_response, preflight_response
from src.companion.logging_util import get_logger
from src.companion.types import HttpResponse

logger = get_logger(__name__)

_handler: Optional[ChatHandler] = None

def _get_handler() -> ChatHandler:
    global _handler
    if _handler is None:
        _handler = ChatHandler(load_config())
    return _handler

def _event_method(event: Dict[str, Any]) -> str:
    method = event.get("httpMethod")
    if not method:
        method = ((event.get("requestContext") or {}).get("http") or {}).get("method")
    return str(method or "POST")

def _event_body(event: Dict[str, Any]) -> Any:
    if "body" not in event and "httpMethod" not in event and "requestContext" not in event:
        return event
    body = event.get("body")
    if body and event.get("isBase64Encoded"):
        try:
            return base64.b64decode(body)
        except (binascii.Error, ValueError):
            return b""
    return body

def to_proxy_response(resp: HttpResponse) -> Dict[str, Any]:
    return {"statusCode": resp.status_code, "headers": resp.headers, "body": resp.body or ""}

def lambda_handler(event: Dict[str, Any], context: Any):
    request_id = getattr(context, "aws_request_id", None)
    event = event if isinstance(event, dict) else {}
    method = _event_method(event)
    if method.strip().upper() == "OPTIONS":
        return to_proxy_response(preflight_response())

    try:
        handler = _get_handler()
    except CompanionError as e:
        logger.error("lambda_handler configuration error: %s", e)
        return to_proxy_response(error_response(str(e)))

    resp = handler.handle(method, _event_body(event), request_id=request_id)
    return to_proxy_response(resp)
