from __future__ import annotations

import functools
import json
import logging
import uuid
from typing import Any, Awaitable, Callable, Dict, Optional

from aiohttp import web

from automation import BookingRequest, BookingResult, ValidationError, book_appointment
from automation.logging_context import set_booking_id

from .config import ServerConfig
from .payload import PAYLOAD_SHAPES

logger = logging.getLogger(__name__)

Booker = Callable[[BookingRequest], Awaitable[BookingResult]]

CONFIG_KEY = web.AppKey("config", ServerConfig)
BOOKER_KEY = web.AppKey("booker", Booker)

READ_CHUNK_BYTES = 64 * 1024


class BodyTooLarge(Exception):
    """The request body crossed the configured ceiling."""


def json_response(payload: Dict[str, Any], status: int = 200) -> web.Response:
    return web.json_response(payload, status=status)


@web.middleware
async def not_found_middleware(request: web.Request, handler) -> web.StreamResponse:
    try:
        return await handler(request)
    except (web.HTTPNotFound, web.HTTPMethodNotAllowed):
        return json_response({"error": "Not found"}, status=404)


async def read_limited_body(request: web.Request, limit: int) -> bytes:
    """Read the whole body, raising ``BodyTooLarge`` as soon as it exceeds ``limit``."""
    if request.content_length is not None and request.content_length > limit:
        raise BodyTooLarge(request.content_length)
    received = bytearray()
    async for chunk in request.content.iter_chunked(READ_CHUNK_BYTES):
        received.extend(chunk)
        if len(received) > limit:
            raise BodyTooLarge(len(received))
    return bytes(received)


def _drop_connection(request: web.Request) -> web.Response:
    transport = request.transport
    if transport is not None:
        transport.close()
    # Never reaches the client; the transport is already closed.
    return web.Response(status=413)


async def health(request: web.Request) -> web.Response:
    return json_response({"status": "ok"})


async def booking_webhook(request: web.Request) -> web.Response:
    config = request.app[CONFIG_KEY]
    booker = request.app[BOOKER_KEY]
    booking_id = uuid.uuid4().hex[:8]
    set_booking_id(booking_id)

    try:
        raw = await read_limited_body(request, config.max_body_bytes)
    except BodyTooLarge as exc:
        logger.warning(
            "Dropping connection: body of %s bytes exceeds %s", exc.args[0], config.max_body_bytes
        )
        return _drop_connection(request)

    try:
        parsed: Any = json.loads(raw) if raw.strip() else {}
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        return _with_id(
            json_response({"error": "Invalid JSON", "details": [str(exc)]}, status=400),
            booking_id,
        )

    if not isinstance(parsed, dict):
        return _with_id(
            json_response(
                {"error": "Invalid payload", "details": ["Request body must be a JSON object"]},
                status=400,
            ),
            booking_id,
        )

    validate, to_request = PAYLOAD_SHAPES[config.payload_shape]
    errors = validate(parsed)
    if errors:
        logger.info("Rejected booking payload: %s", "; ".join(errors))
        return _with_id(
            json_response({"error": "Invalid payload", "details": errors}, status=400),
            booking_id,
        )

    booking_request = to_request(parsed, config.booking)
    logger.info(
        "Incoming booking request: %s",
        json.dumps(_redact(parsed), sort_keys=True),
    )

    try:
        result = await booker(booking_request)
    except ValidationError as exc:
        return _with_id(
            json_response({"error": "Invalid payload", "details": exc.errors}, status=400),
            booking_id,
        )

    if result.ok:
        return _with_id(json_response({"status": "success", "slot": result.slot}), booking_id)

    logger.error("Booking automation failed at %s: %s", result.failed_step, result.message)
    return _with_id(
        json_response(
            {
                "status": "failed",
                "message": "Booking automation failed",
                "details": result.message,
                "step": result.failed_step,
            },
            status=500,
        ),
        booking_id,
    )


def _with_id(response: web.Response, booking_id: str) -> web.Response:
    response.headers["X-Booking-Id"] = booking_id
    return response


def _redact(body: Dict[str, Any]) -> Dict[str, Any]:
    hidden = {"email", "phone"}
    redacted = {key: ("***" if key in hidden else value) for key, value in body.items()}
    customer = redacted.get("customerInfo")
    if isinstance(customer, dict):
        redacted["customerInfo"] = {
            key: ("***" if key in hidden else value) for key, value in customer.items()
        }
    return redacted


def create_app(config: ServerConfig, booker: Optional[Booker] = None) -> web.Application:
    """Build the webhook application; ``booker`` defaults to the real browser sequencer."""
    app = web.Application(middlewares=[not_found_middleware])
    app[CONFIG_KEY] = config
    app[BOOKER_KEY] = booker or functools.partial(book_appointment, settings=config.booking)
    app.router.add_get("/health", health)
    app.router.add_post("/webhook/booking", booking_webhook)
    return app
