import base64

import pytest
from fastapi.testclient import TestClient

from lppdownlink.main import app


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def ttn_env(monkeypatch):
    monkeypatch.setenv("TTN_SERVER", "https://eu1.cloud.thethings.network")
    monkeypatch.setenv("TTN_API_KEY", "NNSXS.secret")
    monkeypatch.setenv("TTN_APPLICATION_ID", "street-lights")
    monkeypatch.setenv("TTN_DEVICE_ID", "lamp-01")
    monkeypatch.setenv("DOWNLINK_F_PORT", "3")
    monkeypatch.setenv("DOWNLINK_PRIORITY", "NORMAL")
    monkeypatch.setenv("DOWNLINK_INSERT_MODE", "replace")
    monkeypatch.setenv("DOWNLINK_CONFIRMED", "false")


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"ok": True}


def test_list_types(client):
    response = client.get("/api/lpp/types")

    assert response.status_code == 200
    types = {t["name"]: t for t in response.json()}
    assert len(types) == 27
    assert types["addGPS"]["altitude_range"]["scale"] == 100
    assert types["addTemperature"]["altitude_range"] is None


def test_get_type(client):
    response = client.get("/api/lpp/types/addTemperature")

    assert response.status_code == 200
    assert response.json()["code"] == "67"
    assert client.get("/api/lpp/types/addMagic").status_code == 404


def test_encode_endpoint_returns_payload_and_diagnostics(client):
    response = client.post(
        "/api/lpp/encode",
        json={"entries": [[5, "addDigitalInput", 7], [1, "addRelativeHumidity", 150], [3, "addTemperature", -5.7]]},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["payload"] == "050007" + "0367ffc7"
    assert [d["reason"] for d in data["diagnostics"]] == ["out of range"]
    assert data["diagnostics"][0]["index"] == 1


def test_encode_endpoint_empty_entries(client):
    response = client.post("/api/lpp/encode", json={"entries": []})

    assert response.status_code == 200
    assert response.json() == {"payload": "", "diagnostics": []}


def test_light_intensity_downlink(client, ttn_env):
    response = client.post(
        "/api/downlinks/light-intensity",
        json={"password": "1234", "settings": {"threshold": 500}},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["payload"] == "656501f4648004d2"
    assert data["url"].endswith("/applications/street-lights/devices/lamp-01/down/replace")
    entry = data["body"]["downlinks"][0]
    assert entry["f_port"] == 3
    assert base64.b64decode(entry["frm_payload"]).hex() == data["payload"]
    assert "NNSXS.secret" not in response.text


def test_common_settings_downlink(client, ttn_env):
    response = client.post(
        "/api/downlinks/common",
        json={"password": "1", "settings": {"reset_and_load": 2}},
    )

    assert response.status_code == 200
    assert response.json()["payload"] == "640002" + "64800001"


def test_switching_times_downlink(client, ttn_env):
    response = client.post(
        "/api/downlinks/switching-times",
        json={"password": "1", "settings": {"on_1": {"at": "06:30:15"}, "off_1": {}}},
    )

    assert response.status_code == 200
    assert response.json()["payload"] == "65c0005b77" + "66c00186a0" + "64800001"


def test_sun_position_out_of_range_is_reported(client, ttn_env):
    response = client.post(
        "/api/downlinks/sun-position",
        json={"password": "1", "settings": {"latitude": 900, "longitude": 17.1}},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["payload"] == "64800001"
    assert data["diagnostics"][0]["type_name"] == "addGPS"


def test_downlink_missing_api_key(client, ttn_env, monkeypatch):
    monkeypatch.setenv("TTN_API_KEY", "")

    response = client.post(
        "/api/downlinks/light-intensity",
        json={"password": "1234", "settings": {"threshold": 1}},
    )

    assert response.status_code == 422
    assert response.json()["detail"] == "API key is empty!"


def test_downlink_rejects_bad_password(client, ttn_env):
    response = client.post(
        "/api/downlinks/light-intensity",
        json={"password": "12345", "settings": {"threshold": 1}},
    )

    assert response.status_code == 422


def test_downlink_malformed_f_port_config(client, ttn_env, monkeypatch):
    monkeypatch.setenv("DOWNLINK_F_PORT", "x")

    response = client.post(
        "/api/downlinks/sun-position",
        json={"password": "1", "settings": {"latitude": 48.1, "longitude": 17.1}},
    )

    assert response.status_code == 422
    assert "DOWNLINK_F_PORT" in response.json()["detail"]
