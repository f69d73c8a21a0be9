"""
RouterOS API client.

The wire protocol itself is librouteros. This module decides how we
dial (plain TCP or TLS, with a dial timeout), how we authenticate
(cleartext login with a fallback to the pre-6.43 MD5 challenge), and
hands collectors replies as plain string maps.
"""

from __future__ import annotations

import functools
import hashlib
import logging
import ssl
from dataclasses import dataclass, field
from typing import Optional

import librouteros
from librouteros.exceptions import FatalError, TrapError

from mikrotik_exporter.collector.helpers import reply_value
from mikrotik_exporter.config import Device

log = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 5.0


class LoginError(FatalError):
    """Authentication failed at either login stage.

    Subclasses FatalError: librouteros only closes the socket of a
    failed login for FatalError and ConnectionClosed.
    """


@dataclass
class Reply:
    """Records returned by one command, values as RouterOS text."""

    records: list = field(default_factory=list)
    done: dict = field(default_factory=dict)

    @property
    def ret(self) -> Optional[str]:
        """The `ret` word of the reply, e.g. the result of =count-only=."""
        return self.done.get("ret")


def to_reply(rows) -> Reply:
    """Split librouteros rows into data records and the `ret` sentence.

    librouteros yields the terminal !done sentence as a row of its own
    when it carries words, which is how =ret= comes back.
    """
    reply = Reply()
    for row in rows:
        converted = {key: reply_value(value) for key, value in row.items()}
        if set(converted) == {"ret"}:
            reply.done = converted
        else:
            reply.records.append(converted)
    return reply


def challenge_response(challenge: bytes, password: str) -> str:
    """MD5 challenge response used by RouterOS before 6.43."""
    digest = hashlib.md5()
    digest.update(b"\x00")
    digest.update(password.encode("utf-8"))
    digest.update(challenge)
    return "00" + digest.hexdigest()


def login(api, username: str, password: str) -> None:
    """Log in, supporting both the cleartext and the challenge flow.

    Newer RouterOS accepts name/password directly and answers without a
    `ret`. Older versions answer with a hex challenge that has to be
    hashed and sent back.
    """
    try:
        reply = to_reply(api.rawCmd("/login", f"=name={username}", f"=password={password}"))
        if reply.ret is None:
            return

        try:
            challenge = bytes.fromhex(reply.ret)
        except ValueError as e:
            raise LoginError(f"invalid login challenge {reply.ret!r}") from e

        to_reply(api.rawCmd("/login", f"=name={username}",
                            f"=response={challenge_response(challenge, password)}"))
    except TrapError as e:
        raise LoginError(f"login failed for user {username!r}: {e}") from e


class RouterOSClient:
    """One authenticated API connection."""

    def __init__(self, api, device_name: str = ""):
        self._api = api
        self._device_name = device_name

    def run(self, command: str, *words: str) -> Reply:
        log.debug("%s: running %s %s", self._device_name, command, " ".join(words))
        return to_reply(self._api.rawCmd(command, *words))

    def close(self):
        self._api.close()


def _ssl_wrapper(address: str, insecure: bool):
    context = ssl.create_default_context()
    if insecure:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
        return context.wrap_socket
    return functools.partial(context.wrap_socket, server_hostname=address)


def connect(device: Device, timeout: float = DEFAULT_TIMEOUT,
            tls: bool = False, insecure: bool = False) -> RouterOSClient:
    """Dial and log in to a device.

    The device's own tls/insecure settings win over the global ones.
    """
    use_tls = tls if device.tls is None else device.tls
    skip_verify = insecure if device.insecure is None else device.insecure
    port = device.port_for(use_tls)

    kwargs = {
        "port": port,
        "timeout": timeout,
        "login_method": login,
        "encoding": "utf-8",
    }
    if use_tls:
        kwargs["ssl_wrapper"] = _ssl_wrapper(device.address, skip_verify)

    log.debug("%s: dialing %s:%d (tls=%s)", device.name, device.address, port, use_tls)
    api = librouteros.connect(device.address, device.user, device.password, **kwargs)
    log.debug("%s: logged in", device.name)
    return RouterOSClient(api, device_name=device.name)
