import base64
import io

import numpy as np
import pytest
from PIL import Image

from app import app as flask_app
from veilbits.settings import Settings

SCENARIO_HOST = bytes([50, 80, 60, 100, 10, 50, 150, 210, 14, 58, 23, 47])


@pytest.fixture
def client():
    flask_app.config["TESTING"] = True
    with flask_app.test_client() as client:
        yield client


def _png(size=(16, 16), seed=21):
    rng = np.random.default_rng(seed)
    arr = rng.integers(0, 256, size=(size[1], size[0], 3), dtype=np.uint8)
    buf = io.BytesIO()
    Image.fromarray(arr).save(buf, format="PNG")
    return buf.getvalue()


def _decode_data_url(data_url):
    header, b64 = data_url.split(",", 1)
    return header, base64.b64decode(b64)


def _post(client, endpoint, host, filename="host.png", **fields):
    data = {"host": (io.BytesIO(host), filename)}
    data.update(fields)
    return client.post(endpoint, data=data, content_type="multipart/form-data")


def test_methods_listing(client):
    response = client.get("/api/methods")
    assert response.status_code == 200
    assert set(response.get_json()["methods"]) == {"lsb", "msb", "pvd"}


def test_lsb_image_round_trip(client):
    response = _post(client, "/api/embed", _png(), text="hello LSB", method="lsb", bits="2", framed="true")
    assert response.status_code == 200
    body = response.get_json()
    assert body["bits_written"] == (2 + len("hello LSB")) * 8
    assert body["capacity"] == 16 * 16 * 3 * 2
    assert body["filename"] == "encoded.png"

    header, stego = _decode_data_url(body["data_url"])
    assert header == "data:image/png;base64"

    response = _post(client, "/api/extract", stego, method="lsb", bits="2", framed="true")
    assert response.status_code == 200
    assert response.get_json()["preview"] == "hello LSB"
    assert base64.b64decode(response.get_json()["payload_b64"]) == b"hello LSB"


def test_heatmap_locator_round_trip(client):
    fields = {"method": "lsb", "bits": "1", "locator": "heatmap", "framed": "true"}
    response = _post(client, "/api/embed", _png(), text="busy regions first", **fields)
    assert response.status_code == 200
    _, stego = _decode_data_url(response.get_json()["data_url"])

    response = _post(client, "/api/extract", stego, **fields)
    assert response.status_code == 200
    assert response.get_json()["preview"] == "busy regions first"


def test_pvd_raw_host(client):
    response = _post(
        client, "/api/embed", SCENARIO_HOST, filename="host.bin", text="Hi", method="pvd", hostKind="raw"
    )
    assert response.status_code == 200
    body = response.get_json()
    assert body["bits_written"] == 16
    header, stego = _decode_data_url(body["data_url"])
    assert header == "data:application/octet-stream;base64"
    assert list(stego) == [55, 75, 56, 104, 1, 59, 160, 200, 14, 58, 23, 47]

    response = _post(client, "/api/extract", stego, filename="host.bin", method="pvd", hostKind="raw")
    assert base64.b64decode(response.get_json()["payload_b64"]).startswith(b"Hi")


def test_positions_locator(client):
    fields = {"method": "msb", "hostKind": "raw", "bits": "4", "locator": "positions", "positions": "3,1"}
    response = _post(client, "/api/embed", bytes(4), filename="host.bin", text="Z", **fields)
    assert response.status_code == 200
    _, stego = _decode_data_url(response.get_json()["data_url"])
    assert list(stego) == [0, 0xA0, 0, 0x50]


def test_engine_errors_are_reported_with_kind(client):
    response = _post(client, "/api/embed", bytes(4), filename="host.bin", text="too long", hostKind="raw")
    assert response.status_code == 400
    body = response.get_json()
    assert body["kind"] == "insufficient_capacity"
    assert body["context"] == {"bits_written": 4, "bits_needed": 64}


def test_heatmap_refused_for_pvd(client):
    response = _post(client, "/api/embed", _png(), text="x", method="pvd", locator="heatmap")
    assert response.status_code == 400
    assert response.get_json()["kind"] == "invalid_options"


def test_bad_requests(client):
    response = client.post("/api/embed", data={"text": "x"}, content_type="multipart/form-data")
    assert response.status_code == 400
    assert response.get_json()["error"] == "Host file is required"

    response = _post(client, "/api/embed", _png(), method="lsb")
    assert response.status_code == 400

    response = _post(client, "/api/embed", _png(), text="x", outputFormat="jpeg")
    assert response.status_code == 400
    assert "Unsupported output format" in response.get_json()["error"]

    response = _post(client, "/api/extract", b"garbage", method="lsb")
    assert response.status_code == 400


def test_upload_limit_comes_from_settings(client, monkeypatch):
    monkeypatch.setitem(flask_app.config, "VEILBITS_SETTINGS", Settings(max_upload_bytes=8))
    response = _post(client, "/api/embed", bytes(16), filename="host.bin", text="x", hostKind="raw")
    assert response.status_code == 400
    assert "too large" in response.get_json()["error"]
