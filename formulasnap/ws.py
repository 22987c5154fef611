"""WebSocket command channel for the desktop UI.

Each message is ``{"id", "action", "payload"}``; each reply echoes the id
with either ``{"ok": true, "result"}`` or ``{"ok": false, "error", "code"}``.
A failing command never closes the socket.
"""

import json
import logging
import traceback

from starlette.websockets import WebSocket, WebSocketDisconnect

from formulasnap import handlers
from formulasnap.errors import RecognitionError, ValidationError
from formulasnap.store import get_store
from formulasnap.usage import get_usage_tracker

logger = logging.getLogger("formulasnap.ws")


async def ws_endpoint(websocket: WebSocket) -> None:
    await websocket.accept()

    try:
        while True:
            raw = await websocket.receive_text()
            req_id = None

            try:
                msg = _parse_message(raw)
                req_id = msg.get("id")
                payload = msg.get("payload") or {}
                if not isinstance(payload, dict):
                    raise ValidationError("errors.bad_message")
                result = await _dispatch(msg.get("action"), payload)
                await websocket.send_json({"id": req_id, "ok": True, "result": result})
            except RecognitionError as exc:
                await websocket.send_json({
                    "id": req_id, "ok": False,
                    "error": str(exc), "code": exc.status_code,
                    "error_type": exc.error_type,
                })
            except Exception as exc:
                logger.error("WS dispatch error: %s\n%s", exc, traceback.format_exc())
                await websocket.send_json({
                    "id": req_id, "ok": False,
                    "error": str(exc) or "Internal error", "code": 500,
                })
    except WebSocketDisconnect:
        pass


def _parse_message(raw: str) -> dict:
    try:
        msg = json.loads(raw)
    except ValueError:
        msg = None
    if not isinstance(msg, dict):
        raise ValidationError("errors.bad_message")
    return msg


async def _dispatch(action: str, payload: dict) -> dict:
    store = get_store()

    if action == "get_settings":
        return await handlers.handle_get_settings(store, get_usage_tracker())

    elif action == "save_settings":
        return await handlers.handle_save_settings(
            store,
            simpletex_token=payload.get("simpletex_token"),
            siliconflow_key=payload.get("siliconflow_key"),
            simpletex_model=payload.get("simpletex_model"),
            voucher_models_text=payload.get("voucher_models_text"),
        )

    elif action == "test_simpletex":
        return await handlers.handle_test_simpletex(store, payload.get("token"))

    elif action == "test_siliconflow":
        return await handlers.handle_test_siliconflow(store, payload.get("api_key"))

    elif action == "get_available_models":
        return await handlers.handle_get_available_models(store, get_usage_tracker())

    elif action == "get_sf_balance":
        return await handlers.handle_get_sf_balance(store)

    elif action == "recognize":
        return await handlers.handle_recognize(
            store,
            get_usage_tracker(),
            image=payload.get("image") or "",
            mode=payload.get("mode") or "formula",
            model_id=payload.get("model_id") or "",
        )

    elif action == "open_external_url":
        return await handlers.handle_open_external_url(payload.get("url") or "")

    else:
        raise ValidationError("errors.unknown_action", action=action)
