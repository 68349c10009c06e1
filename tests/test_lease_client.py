import time

import pytest
import requests
from unittest.mock import MagicMock

from client.lease_client import LeaseClient, LeaseClientError, LeaseKeeper


def _response(status, payload):
    resp = MagicMock()
    resp.status_code = status
    resp.json.return_value = payload
    resp.text = str(payload)
    return resp


@pytest.fixture
def lease_client():
    return LeaseClient("http://ids:3000/")


def test_next_success(lease_client, monkeypatch):
    mock_get = MagicMock(return_value=_response(200, {"id": 7, "exp": 1234}))
    monkeypatch.setattr("requests.get", mock_get)

    assert lease_client.next() == (7, 1234)
    mock_get.assert_called_with("http://ids:3000/next", timeout=2.0)


def test_next_exhausted(lease_client, monkeypatch):
    body = {"error": {"code": 1, "msg": "No id available!"}}
    monkeypatch.setattr("requests.get", MagicMock(return_value=_response(409, body)))

    with pytest.raises(LeaseClientError) as excinfo:
        lease_client.next()
    assert excinfo.value.code == 1
    assert excinfo.value.status == 409


def test_heartbeat_success(lease_client, monkeypatch):
    mock_get = MagicMock(return_value=_response(200, {"id": 7, "exp": 5678}))
    monkeypatch.setattr("requests.get", mock_get)

    assert lease_client.heartbeat(7) == 5678
    mock_get.assert_called_with("http://ids:3000/heartbeat/7", timeout=2.0)


def test_non_json_error(lease_client, monkeypatch):
    resp = _response(502, None)
    resp.json.side_effect = ValueError("not json")
    resp.text = "Bad Gateway"
    monkeypatch.setattr("requests.get", MagicMock(return_value=resp))

    with pytest.raises(LeaseClientError, match="Bad Gateway"):
        lease_client.next()


def test_transport_failure(lease_client, monkeypatch):
    mock_get = MagicMock(side_effect=requests.exceptions.ConnectionError("refused"))
    monkeypatch.setattr("requests.get", mock_get)

    with pytest.raises(RuntimeError, match="Request to /next failed"):
        lease_client.next()


class TestLeaseKeeper:

    def test_beat_updates_expiry(self):
        client = MagicMock()
        client.next.return_value = (3, 100)
        client.heartbeat.return_value = 200
        keeper = LeaseKeeper(client, interval_ms=60_000)

        assert keeper.start() == 3
        try:
            assert keeper.beat()
            assert keeper.expires_at == 200
            client.heartbeat.assert_called_with(3)
        finally:
            keeper.stop(timeout=2)

    def test_rejected_heartbeat_marks_lost(self):
        client = MagicMock()
        client.next.return_value = (3, 100)
        client.heartbeat.side_effect = LeaseClientError(2, "Id not leased!", 410)
        on_lost = MagicMock()
        keeper = LeaseKeeper(client, interval_ms=10, on_lost=on_lost)

        keeper.start()
        try:
            assert keeper.lost.wait(5)
        finally:
            keeper.stop(timeout=2)

        on_lost.assert_called_once()
        assert on_lost.call_args[0][0] == 3
        client.next.assert_called_once()

    def test_transport_error_is_retried(self):
        client = MagicMock()
        client.next.return_value = (3, 100)
        beats = []

        def heartbeat(lease_id):
            beats.append(lease_id)
            if len(beats) == 1:
                raise RuntimeError("timeout")
            return 100 + len(beats)

        client.heartbeat.side_effect = heartbeat
        keeper = LeaseKeeper(client, interval_ms=10)

        keeper.start()
        try:
            deadline = time.monotonic() + 5
            while client.heartbeat.call_count < 3 and time.monotonic() < deadline:
                time.sleep(0.01)
        finally:
            keeper.stop(timeout=2)

        assert client.heartbeat.call_count >= 3
        assert not keeper.lost.is_set()
