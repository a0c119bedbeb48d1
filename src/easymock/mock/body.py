"""
EasyMock Replayable Body

Restartable, cloneable byte source used as ``requests.Response.raw`` for
canned responses, so a single registered response can be replayed for any
number of requests.
"""

import io
import threading
from typing import Iterator, Optional, Union


class ReplayableBody:
    """
    Seekable reader over an immutable payload.

    The payload is tagged once at construction: ``str`` payloads are text
    (stored UTF-8 encoded), ``bytes`` payloads are raw. Reading to exhaustion
    rewinds the cursor, and ``clone()`` returns an independent cursor over the
    same payload.

    A whole read (no size) rewinds as soon as it returns, so every ``read()``
    yields the full payload. Sized reads follow the file protocol instead:
    ``b''`` marks the end of one pass and rewinds, which lets chunk loops
    such as ``shutil.copyfileobj`` terminate.

    Example:
        body = ReplayableBody("hello")
        body.read()    # b'hello'
        body.read()    # b'hello'
        body.read(3)   # b'hel'
        body.read(3)   # b'lo'
        body.read(3)   # b'' (end of pass, cursor rewound)
    """

    def __init__(self, payload: Union[str, bytes, bytearray, None] = None):
        if payload is None:
            payload = b''
        if isinstance(payload, str):
            self.is_text = True
            self._data = payload.encode('utf-8')
        elif isinstance(payload, (bytes, bytearray)):
            self.is_text = False
            self._data = bytes(payload)
        else:
            raise TypeError(f"body payload must be str or bytes, got {type(payload).__name__}")

        self.payload = payload
        self._cursor = io.BytesIO(self._data)
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._data)

    @property
    def data(self) -> bytes:
        """Encoded payload bytes."""
        return self._data

    def read(self, size: Optional[int] = -1, decode_content: Optional[bool] = None) -> bytes:
        """
        Read up to ``size`` bytes (all remaining bytes when ``size`` is
        negative or None).

        A whole read returns the rest of the payload, or all of it when the
        cursor sits at the end, and rewinds. A sized read returns ``b''``
        once the payload is exhausted and rewinds, so the next read starts
        again from the beginning.
        """
        if size == 0:
            return b''
        with self._lock:
            if size is None or size < 0:
                if self._cursor.tell() >= len(self._data):
                    self._cursor.seek(0)
                chunk = self._cursor.read()
                self._cursor.seek(0)
                return chunk
            chunk = self._cursor.read(size)
            if not chunk:
                self._cursor.seek(0)
            return chunk

    def stream(self, amt: Optional[int] = 2 ** 16, decode_content: Optional[bool] = None) -> Iterator[bytes]:
        """
        Yield one pass over the remaining payload in ``amt``-sized chunks.

        ``requests`` prefers this over ``read()`` when iterating content, so a
        pass always ends even for ``iter_content(chunk_size=None)``.
        """
        if not amt or amt < 0:
            chunk = self.read()
            if chunk:
                yield chunk
            return
        while True:
            chunk = self.read(amt)
            if not chunk:
                return
            yield chunk

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        with self._lock:
            return self._cursor.seek(offset, whence)

    def tell(self) -> int:
        with self._lock:
            return self._cursor.tell()

    def readable(self) -> bool:
        return True

    def seekable(self) -> bool:
        return True

    def close(self):
        """Rewind; the payload stays readable after close."""
        self.seek(0)

    def release_conn(self):
        pass

    def clone(self) -> 'ReplayableBody':
        """Return an independent reader positioned at the start of the payload."""
        return ReplayableBody(self.payload if self.is_text else self._data)

    def __repr__(self) -> str:
        kind = 'text' if self.is_text else 'bytes'
        return f"ReplayableBody({kind}, {len(self._data)} bytes)"
