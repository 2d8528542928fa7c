"""CORS helpers for callable and HTTP functions."""

import json
from typing import Optional, Dict, Any, List
from flask import Response
from firebase_functions import https_fn

ALLOWED_HEADERS = "Content-Type, Authorization, Stripe-Signature"


def _preflight_headers(methods: List[str]) -> Dict[str, str]:
    return {
        "Access-Control-Allow-Origin": "*",
        "Access-Control-Allow-Methods": ", ".join(methods),
        "Access-Control-Allow-Headers": ALLOWED_HEADERS,
        "Access-Control-Max-Age": "3600",
    }


def cors_response_on_call(raw_request) -> Optional[tuple]:
    """Preflight reply for callable functions, None for every other request."""
    if raw_request is not None and raw_request.method == "OPTIONS":
        return ("", 204, _preflight_headers(["POST", "OPTIONS"]))
    return None


def handle_cors_preflight(req: https_fn.Request, allowed_methods: Optional[List[str]] = None) -> Optional[Response]:
    """Empty 204 response with CORS headers for OPTIONS requests, else None.

    Args:
        req: Firebase HTTP request object
        allowed_methods: List of allowed HTTP methods
    """
    if req.method != "OPTIONS":
        return None

    methods = allowed_methods or ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
    response = Response("", status=204)
    for key, value in _preflight_headers(methods).items():
        response.headers[key] = value
    return response


def add_cors_headers(response: Response) -> Response:
    response.headers["Access-Control-Allow-Origin"] = "*"
    response.headers["Access-Control-Allow-Methods"] = "GET, POST, OPTIONS"
    response.headers["Access-Control-Allow-Headers"] = ALLOWED_HEADERS
    return response


def create_cors_response(data: Any, status: int = 200) -> Response:
    """JSON response with CORS headers.

    Args:
        data: JSON-serializable payload (datetimes are written as strings)
        status: HTTP status code
    """
    response = Response(json.dumps(data, default=str), status=status, mimetype="application/json")
    return add_cors_headers(response)
