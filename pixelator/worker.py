# pixelator/worker.py
from __future__ import annotations

"""
A single background execution context for pipeline requests.

Exports:
  PixelatorWorker
    .submit(request)     -> Future[Response]
    .post(request)       -> request_id; the response lands on .results
    .next_request_id()   -> int
    .close(wait=True)

One worker thread runs requests strictly one at a time, so responses
complete (and arrive on .results) in submission order. There is no
cancellation; hosts drop stale responses by request_id.
"""

import itertools
import queue
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import replace
from typing import Optional

from .pipeline import Request, Response, handle_request


class PixelatorWorker:
    def __init__(self, name: str = "pixelator") -> None:
        self._pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix=name)
        self._ids = itertools.count(1)
        self._id_lock = threading.Lock()
        self.results: "queue.Queue[Response]" = queue.Queue()

    def next_request_id(self) -> int:
        with self._id_lock:
            return next(self._ids)

    def submit(self, request: Request) -> "Future[Response]":
        """Queue `request`; the future resolves to its response (never raises)."""
        return self._pool.submit(handle_request, request)

    def post(self, request: Request, request_id: Optional[int] = None) -> int:
        """
        Stamp `request` with a fresh (or given) id, queue it, and deliver the
        response on `self.results` once it completes.
        """
        rid = self.next_request_id() if request_id is None else request_id
        stamped = replace(request, request_id=rid)
        self._pool.submit(self._run_and_publish, stamped)
        return rid

    def _run_and_publish(self, request: Request) -> None:
        self.results.put(handle_request(request))

    def close(self, wait: bool = True) -> None:
        self._pool.shutdown(wait=wait)

    def __enter__(self) -> "PixelatorWorker":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


__all__ = ["PixelatorWorker"]
