"""
AWS Lambda Handler for the invite-link update

Invoked directly (event = request body) or through API Gateway
(event["body"] holds the JSON request). Checks the API key, validates the
accounts list, then runs the update for every account.
"""
import hmac
import json
import logging
import os
from typing import Any, Callable, Dict, Optional

from dotenv import load_dotenv

from . import configure_logging
from .config import Settings, get_api_key
from .services.context import UpdateContext
from .services.orchestrator import update_invite_links

load_dotenv()
configure_logging(os.environ.get("LOG_LEVEL", "INFO").upper())
logger = logging.getLogger(__name__)

MESSAGE_SUCCESS = "Groups and invite links updated successfully"
MESSAGE_FAILURE = "Failed to update groups and invite links"
MESSAGE_BAD_REQUEST = "Bad Request: Missing accounts"
MESSAGE_UNAUTHORIZED = "Unauthorized: Invalid or missing API key"
MESSAGE_ERROR = "Error processing request"


def build_response(status_code: int, message: str) -> Dict[str, Any]:
    return {
        'statusCode': status_code,
        'headers': {'Content-Type': 'application/json'},
        'body': json.dumps({'message': message}),
    }


def parse_request(event) -> Dict[str, Any]:
    """
    Normalise the incoming event to a request dict.

    API Gateway events carry the request as a JSON string in "body"; the
    headers stay on the outer event.
    """
    if not isinstance(event, dict):
        return {}
    request = dict(event)
    body = event.get('body')
    if isinstance(body, str) and body.strip():
        try:
            parsed = json.loads(body)
        except ValueError:
            parsed = None
        if isinstance(parsed, dict):
            request.update(parsed)
    elif isinstance(body, dict):
        request.update(body)
    return request


def get_request_api_key(request: Dict[str, Any]) -> str:
    """API key from the request field or the x-api-key header."""
    if request.get('apiKey'):
        return str(request['apiKey'])
    headers = request.get('headers') or {}
    if not isinstance(headers, dict):
        return ""
    for name, value in headers.items():
        if str(name).lower() == 'x-api-key' and value:
            return str(value)
    return ""


def is_authorized(provided: str, expected: Optional[str]) -> bool:
    if not provided or not expected:
        return False
    return hmac.compare_digest(provided.encode('utf-8'), expected.encode('utf-8'))


def has_valid_accounts(request: Dict[str, Any]) -> bool:
    accounts = request.get('accounts')
    return isinstance(accounts, list) and len(accounts) > 0


def handle_request(
    event,
    settings_loader: Callable[[], Settings] = Settings.from_env,
    context_factory: Callable[..., UpdateContext] = UpdateContext.from_settings,
) -> Dict[str, Any]:
    """Authenticate, validate and run; always returns a response dict."""
    try:
        request = parse_request(event)

        expected_api_key = get_api_key()
        if not expected_api_key:
            logger.warning("API_KEY environment variable is not set")

        if not is_authorized(get_request_api_key(request), expected_api_key):
            return build_response(401, MESSAGE_UNAUTHORIZED)

        if not has_valid_accounts(request):
            return build_response(400, MESSAGE_BAD_REQUEST)

        settings = settings_loader()
        ctx = context_factory(settings, credentials=request.get('credentials') or None)

        result = update_invite_links(ctx, request['accounts'])
        message = MESSAGE_SUCCESS if result.success else MESSAGE_FAILURE
        return build_response(200, message)

    except Exception:
        logger.exception("Error processing request")
        return build_response(500, MESSAGE_ERROR)


def lambda_handler(event, context):
    """Lambda entry point."""
    return handle_request(event)
