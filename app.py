"""Flask entrypoint exposing the embed/extract engines as a JSON API."""

import base64
from typing import Any, Dict, Optional, Tuple

from flask import Flask, current_app, jsonify, request

from veilbits.errors import EmbeddingError
from veilbits.framing import frame_payload, unframe_payload
from veilbits.hosts import (
    HostLayout,
    host_to_image,
    image_to_host,
    normalize_output_format,
    output_format_extension,
    output_format_mime,
)
from veilbits.locators import materialize
from veilbits.log import configure_logging, get_logger
from veilbits.registry import build_locator, build_options, get_method, get_registry
from veilbits.settings import Settings, load_settings

logger = get_logger(__name__)

app = Flask(__name__)
app.config["VEILBITS_SETTINGS"] = load_settings()
configure_logging(app.config["VEILBITS_SETTINGS"].log_level)


class RequestError(Exception):
    def __init__(self, message: str, status: int = 400):
        super().__init__(message)
        self.message = message
        self.status = status


def _settings() -> Settings:
    return current_app.config["VEILBITS_SETTINGS"]


def _form_flag(value: Optional[str]) -> bool:
    return str(value).strip().lower() in {"true", "1", "yes", "on"}


def as_data_url(data: bytes, mime: str = "image/png") -> str:
    b64 = base64.b64encode(data).decode("ascii")
    return f"data:{mime};base64,{b64}"


def _read_upload(field: str, label: str) -> bytes:
    upload = request.files.get(field)
    if upload is None:
        raise RequestError(f"{label} file is required")
    try:
        data = upload.read()
    except Exception as e:
        raise RequestError(f"Failed to read {label.lower()} file: {str(e)}")
    if not data:
        raise RequestError(f"{label} file is empty")

    max_size = _settings().max_upload_bytes
    if len(data) > max_size:
        raise RequestError(f"{label} file too large. Maximum size is {max_size // (1024 * 1024)}MB")
    return data


def _read_host() -> Tuple[bytearray, Optional[HostLayout]]:
    raw = _read_upload("host", "Host")
    host_kind = (request.form.get("hostKind") or "image").strip().lower()
    if host_kind == "raw":
        return bytearray(raw), None
    if host_kind != "image":
        raise RequestError(f"Invalid hostKind '{host_kind}'. Must be 'image' or 'raw'")
    return image_to_host(raw, mode=request.form.get("hostMode") or "RGB")


def _method_params() -> Dict[str, Any]:
    settings = _settings()
    return {
        "bits": request.form.get("bits") or settings.default_bits,
        "range": request.form.get("pvdRange") or settings.default_pvd_range,
        "positions": request.form.get("positions"),
        "stride": request.form.get("stride"),
        "start": request.form.get("start"),
        "radius": request.form.get("radius"),
    }


def _prepare(host: bytearray):
    method = get_method(request.form.get("method") or "lsb")
    params = _method_params()
    options = build_options(method, params)
    locator = build_locator(request.form.get("locator"), method, options, params)
    return method, options, materialize(locator, host)


def _error_response(exc: Exception, action: str):
    if isinstance(exc, RequestError):
        return jsonify({"error": exc.message}), exc.status
    if isinstance(exc, EmbeddingError):
        logger.info("%s rejected: %s", action, exc.message)
        return jsonify(exc.to_dict()), 400
    if isinstance(exc, ValueError):
        return jsonify({"error": f"{action} failed: {str(exc)}"}), 400
    logger.exception("Unexpected error during %s", action.lower())
    return jsonify({"error": f"Unexpected error during {action.lower()}: {str(exc)}"}), 500


@app.get("/api/methods")
def api_methods():
    return jsonify({"methods": get_registry()})


@app.post("/api/embed")
def api_embed():
    try:
        host, layout = _read_host()

        payload_file = request.files.get("payload")
        if payload_file is not None:
            payload = _read_upload("payload", "Payload")
        else:
            text = request.form.get("text") or ""
            if not text:
                raise RequestError("Text payload or payload file is required")
            payload = text.encode("utf-8")
        if _form_flag(request.form.get("framed", "false")):
            payload = frame_payload(payload)

        method, options, indices = _prepare(host)
        capacity = method.capacity(host, options, indices)
        bits_written = method.embed(host, payload, options, indices)

        if layout is None:
            filename, mime, data = "encoded.bin", "application/octet-stream", bytes(host)
        else:
            output_format = normalize_output_format(request.form.get("outputFormat", "png"))
            data = host_to_image(host, layout, output_format)
            filename = f"encoded{output_format_extension(output_format)}"
            mime = output_format_mime(output_format)
    except Exception as exc:
        return _error_response(exc, "Embedding")

    logger.info("embedded %d bits with %s (capacity %d)", bits_written, method.method_id, capacity)
    return jsonify(
        {
            "bits_written": bits_written,
            "capacity": capacity,
            "filename": filename,
            "data_url": as_data_url(data, mime=mime),
        }
    )


@app.post("/api/extract")
def api_extract():
    try:
        host, _ = _read_host()
        method, options, indices = _prepare(host)
        data = method.extract(host, options, indices)
        if _form_flag(request.form.get("framed", "false")):
            data = unframe_payload(data)
    except Exception as exc:
        return _error_response(exc, "Extraction")

    logger.info("extracted %d bytes with %s", len(data), method.method_id)
    return jsonify(
        {
            "payload_b64": base64.b64encode(data).decode("ascii"),
            "preview": data[:256].decode("utf-8", errors="replace"),
            "length": len(data),
        }
    )


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=5000, debug=True)
