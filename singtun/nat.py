"""Port-mapping table used to redirect TCP flows to a local listener."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Hashable, Optional

FIRST_NAT_PORT = 10000


@dataclass
class TCPSession:
    """A translated flow: its original endpoints and when it was last used."""

    source: Hashable
    destination: Hashable
    last_active: float


class TCPNat:
    """Maps flow sources to NAT ports and back, expiring idle sessions."""

    def __init__(self, timeout: float, clock: Callable[[], float] = time.monotonic) -> None:
        if timeout <= 0:
            raise ValueError("timeout must be positive")
        self.timeout = timeout
        self._clock = clock
        self._lock = threading.Lock()
        self._port_index = FIRST_NAT_PORT
        self._addr_map: Dict[Hashable, int] = {}
        self._port_map: Dict[int, TCPSession] = {}
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def lookup_back(self, port: int) -> Optional[TCPSession]:
        """Return the session behind a NAT port, refreshing its activity time."""
        with self._lock:
            session = self._port_map.get(port)
        if session is not None:
            session.last_active = self._clock()
        return session

    def lookup(self, source: Hashable, destination: Hashable) -> int:
        """Return the NAT port for a source, allocating one if needed."""
        with self._lock:
            port = self._addr_map.get(source)
            if port is not None:
                return port
            next_port = self._port_index
            if next_port == 0:
                next_port = FIRST_NAT_PORT
                self._port_index = FIRST_NAT_PORT + 1
            else:
                self._port_index = (self._port_index + 1) & 0xFFFF
            self._addr_map[source] = next_port
            self._port_map[next_port] = TCPSession(source, destination, self._clock())
            return next_port

    def check_timeout(self) -> None:
        """Drop every session idle for longer than the timeout."""
        now = self._clock()
        with self._lock:
            expired = [
                port
                for port, session in self._port_map.items()
                if now - session.last_active > self.timeout
            ]
            for port in expired:
                session = self._port_map.pop(port)
                self._addr_map.pop(session.source, None)

    def start(self) -> None:
        """Start expiring sessions in the background every timeout period."""
        if self._thread is not None:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name="tcp-nat-timeout", daemon=True)
        self._thread.start()

    def close(self) -> None:
        """Stop the background expiry."""
        self._stop.set()
        thread, self._thread = self._thread, None
        if thread is not None:
            thread.join()

    def _loop(self) -> None:
        while not self._stop.wait(self.timeout):
            self.check_timeout()

    def __enter__(self) -> "TCPNat":
        self.start()
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()