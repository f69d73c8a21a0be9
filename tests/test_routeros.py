"""Tests for login handling, reply conversion and connection setup."""

import hashlib
import ssl

import pytest
from librouteros.exceptions import TrapError

from mikrotik_exporter import routeros
from mikrotik_exporter.config import Device
from mikrotik_exporter.routeros import (
    LoginError,
    RouterOSClient,
    challenge_response,
    connect,
    login,
    to_reply,
)


class _FakeApi:
    """Replays one list of rows per rawCmd call."""

    def __init__(self, *replies):
        self._replies = list(replies)
        self.sent = []
        self.closed = False

    def rawCmd(self, cmd, *words):
        self.sent.append((cmd, words))
        reply = self._replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        yield from reply

    def close(self):
        self.closed = True


def test_plain_login_needs_one_round_trip():
    api = _FakeApi([])
    login(api, username="admin", password="secret")

    assert api.sent == [("/login", ("=name=admin", "=password=secret"))]


def test_challenge_login_sends_md5_response():
    challenge = "0123456789abcdef0123456789abcdef"
    api = _FakeApi([{"ret": challenge}], [])
    login(api, username="admin", password="secret")

    expected = "00" + hashlib.md5(b"\x00" + b"secret" + bytes.fromhex(challenge)).hexdigest()
    assert api.sent[1] == ("/login", ("=name=admin", f"=response={expected}"))


def test_challenge_response_format():
    response = challenge_response(bytes(16), "")
    assert response.startswith("00")
    assert len(response) == 34
    assert response == "00" + hashlib.md5(b"\x00" + bytes(16)).hexdigest()


def test_invalid_challenge_fails_login():
    api = _FakeApi([{"ret": "not-hex"}])
    with pytest.raises(LoginError):
        login(api, username="admin", password="secret")


def test_rejected_login_raises_login_error():
    api = _FakeApi(TrapError("invalid user name or password (6)"))
    with pytest.raises(LoginError):
        login(api, username="admin", password="wrong")


def test_to_reply_separates_ret():
    reply = to_reply([{"name": "ether1", "running": True, "rx-byte": 1024}, {"ret": 3}])

    assert reply.records == [{"name": "ether1", "running": "true", "rx-byte": "1024"}]
    assert reply.ret == "3"


def test_reply_without_ret():
    assert to_reply([]).ret is None


def test_client_runs_and_closes():
    api = _FakeApi([{"name": "gw"}])
    client = RouterOSClient(api, device_name="gw")

    reply = client.run("/system/identity/print")
    client.close()

    assert reply.records == [{"name": "gw"}]
    assert api.closed


def test_connect_plain_uses_default_port(monkeypatch):
    seen = {}

    def fake_connect(host, username, password, **kwargs):
        seen.update(host=host, username=username, password=password, **kwargs)
        return _FakeApi()

    monkeypatch.setattr(routeros.librouteros, "connect", fake_connect)
    device = Device(name="gw", address="10.0.0.1", user="prometheus", password="secret")
    client = connect(device, timeout=2.5)

    assert isinstance(client, RouterOSClient)
    assert seen["host"] == "10.0.0.1"
    assert seen["port"] == 8728
    assert seen["timeout"] == 2.5
    assert seen["login_method"] is login
    assert "ssl_wrapper" not in seen


def test_connect_device_tls_override(monkeypatch):
    seen = {}

    def fake_connect(host, username, password, **kwargs):
        seen.update(kwargs)
        return _FakeApi()

    monkeypatch.setattr(routeros.librouteros, "connect", fake_connect)
    device = Device(name="gw", address="10.0.0.1", tls=True, insecure=True)
    connect(device, tls=False)

    assert seen["port"] == 8729
    assert callable(seen["ssl_wrapper"])


def test_insecure_wrapper_skips_verification(monkeypatch):
    contexts = []
    real_factory = ssl.create_default_context

    def recording_factory(*args, **kwargs):
        context = real_factory(*args, **kwargs)
        contexts.append(context)
        return context

    monkeypatch.setattr(routeros.ssl, "create_default_context", recording_factory)
    routeros._ssl_wrapper("10.0.0.1", insecure=True)

    assert contexts[0].verify_mode == ssl.CERT_NONE
    assert contexts[0].check_hostname is False


def test_rejected_challenge_response_raises_login_error():
    api = _FakeApi([{"ret": "0123456789abcdef0123456789abcdef"}],
                   TrapError("invalid user name or password (6)"))
    with pytest.raises(LoginError):
        login(api, username="admin", password="wrong")

    assert len(api.sent) == 2


def test_verifying_wrapper_checks_device_hostname(monkeypatch):
    wrapped = []

    class _RecordingContext:
        check_hostname = True
        verify_mode = ssl.CERT_REQUIRED

        def wrap_socket(self, sock, **kwargs):
            wrapped.append((sock, kwargs))
            return sock

    monkeypatch.setattr(routeros.ssl, "create_default_context", lambda *a, **kw: _RecordingContext())
    wrapper = routeros._ssl_wrapper("router.example.com", insecure=False)
    wrapper("sock")

    assert wrapped == [("sock", {"server_hostname": "router.example.com"})]
