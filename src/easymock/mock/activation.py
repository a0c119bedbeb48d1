"""
EasyMock Activation

Installs a mock transport in place of the real one, either process-wide
(every ``HTTPAdapter``, which every ``requests.Session`` mounts by default)
or for individual sessions, and restores the originals on deactivation.

Process-wide activations share one record of the real ``HTTPAdapter.send``
and a stack of active instances: the most recently activated transport
serves requests, and deactivating it hands the adapter back to the one
below it, or to the real send once the stack is empty.
"""

import logging
import threading
from collections import OrderedDict
from typing import Callable, Dict, List, Optional

import requests
from requests.adapters import BaseAdapter, HTTPAdapter

from .transport import MockTransport


logger = logging.getLogger("easymock.mock")

_patch_lock = threading.RLock()
_real_send: Optional[Callable] = None
_active: List['Activation'] = []


def _is_hook(send: Callable) -> bool:
    return getattr(send, '_easymock_hook', False)


def _install_top():
    """Point ``HTTPAdapter.send`` at the newest activation, or the real send."""
    global _real_send
    if _active:
        HTTPAdapter.send = _active[-1]._send_hook
    elif _real_send is not None:
        if _is_hook(HTTPAdapter.send):
            HTTPAdapter.send = _real_send
        _real_send = None


class Activation:
    """
    Activation state for one mock transport.

    ``activate()`` swaps ``HTTPAdapter.send`` for a hook that dispatches to
    the transport. The real send is recorded once for all instances and
    never replaced by a hook, so repeated and overlapping activations are
    safe. ``activate_client()`` routes a single session to the transport and
    remembers the adapters it had before. ``deactivate()`` restores
    everything and may be called any number of times.

    Example:
        activation = Activation(MockTransport())
        with activation:
            requests.get('https://example.test/a')   # served by the transport
    """

    def __init__(self, transport: Optional[MockTransport] = None):
        self.transport = transport or MockTransport()
        self._lock = threading.Lock()
        self._clients: Dict[requests.Session, 'OrderedDict[str, BaseAdapter]'] = {}

        transport = self.transport

        def send(adapter, request, **kwargs):
            return transport.send(request, **kwargs)

        send._easymock_hook = True
        self._send_hook = send

    @property
    def is_active(self) -> bool:
        with _patch_lock:
            if self in _active:
                return True
        with self._lock:
            return bool(self._clients)

    def activate(self):
        """Route every ``HTTPAdapter`` in the process to the transport."""
        global _real_send
        with _patch_lock:
            current = HTTPAdapter.send
            if _real_send is None and not _is_hook(current):
                _real_send = current
            if self in _active:
                _active.remove(self)
            _active.append(self)
            _install_top()
        logger.info("Mock transport activated for the default adapter")

    def activate_client(self, session: requests.Session):
        """Route one session's ``http://`` and ``https://`` traffic to the transport."""
        with self._lock:
            if session not in self._clients:
                self._clients[session] = session.adapters
            adapters: 'OrderedDict[str, BaseAdapter]' = OrderedDict()
            adapters['https://'] = self.transport
            adapters['http://'] = self.transport
            session.adapters = adapters
        logger.info(f"Mock transport activated for session {id(session):#x}")

    def deactivate(self):
        """Restore the default adapter and every activated session."""
        with _patch_lock:
            if self in _active:
                _active.remove(self)
                _install_top()

        with self._lock:
            restored = len(self._clients)
            for session, adapters in self._clients.items():
                session.adapters = adapters
            self._clients.clear()
        logger.info(f"Mock transport deactivated ({restored} sessions restored)")

    def __enter__(self) -> MockTransport:
        self.activate()
        return self.transport

    def __exit__(self, exc_type, exc, tb):
        self.deactivate()


# Process-wide default used by the module-level API in ``easymock``
default_activation = Activation()
default_transport = default_activation.transport
