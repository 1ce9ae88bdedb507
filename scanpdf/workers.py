"""Worker pool - concurrent blank-page evaluation and compression.

Jobs are handed over through a rendezvous queue: the submitting thread is
released only once a worker has taken the page, so a busy pool pauses the
scanner instead of piling raw pages up in memory.
"""

from __future__ import annotations

import logging
import queue
import threading

from .blank_page import score_page, should_keep
from .constants import DEFAULT_WORKERS
from .exceptions import PageProcessingError, ScanPipelineError
from .latch import FailureLatch
from .types import Compressor, PageDescriptor

logger = logging.getLogger(__name__)

__all__ = ["HandoffQueue", "PageWorker", "WorkerPool"]

_CLOSED = object()


class HandoffQueue:
    """Zero-capacity queue: ``submit`` returns once a worker received the job.

    Example:
        >>> jobs = HandoffQueue()
        >>> threading.Thread(target=lambda: print(jobs.receive())).start()
        >>> jobs.submit(page)   # returns after the worker took it
    """

    def __init__(self) -> None:
        self._queue: queue.Queue[object] = queue.Queue(maxsize=1)
        self._submit_lock = threading.Lock()
        self._closed = False

    def submit(self, page: PageDescriptor) -> None:
        """Block until a worker has accepted ``page``.

        Raises:
            RuntimeError: If the queue was closed
        """
        with self._submit_lock:
            if self._closed:
                raise RuntimeError("Hand-off queue is closed")
            self._queue.put(page)
            self._queue.join()

    def receive(self) -> PageDescriptor | None:
        """Take the next job; None once the queue is closed."""
        item = self._queue.get()
        self._queue.task_done()
        if item is _CLOSED:
            return None
        return item  # type: ignore[return-value]

    def close(self, consumers: int) -> None:
        """Wake ``consumers`` receivers with the end-of-work marker."""
        with self._submit_lock:
            self._closed = True
        for _ in range(consumers):
            self._queue.put(_CLOSED)

    @property
    def closed(self) -> bool:
        return self._closed


class PageWorker:
    """Processes pages taken from a HandoffQueue until it is closed.

    For every page: score it, record the keep decision, compress it if kept,
    and delete the raw artifact in every case. Errors are reported to the
    failure latch; once the latch has tripped, remaining pages are skipped.
    """

    def __init__(self, worker_id: int, jobs: HandoffQueue, compressor: Compressor, latch: FailureLatch):
        self.worker_id = worker_id
        self.jobs = jobs
        self.compressor = compressor
        self.latch = latch
        self.processed = 0

    def run(self) -> None:
        while True:
            page = self.jobs.receive()
            if page is None:
                logger.debug("Worker %d done after %d pages", self.worker_id, self.processed)
                return
            self.handle(page)

    def handle(self, page: PageDescriptor) -> None:
        try:
            if self.latch.failed:
                logger.debug("Skipping page %s after earlier failure", page.index)
                return
            self._evaluate(page)
            self.processed += 1
        except ScanPipelineError as e:
            self.latch.fail(e)
        except Exception as e:  # noqa: BLE001 - any page failure aborts the run
            self.latch.fail(PageProcessingError(f"Page {page.index} ({page.source_path}): {e}"))
        finally:
            page.source_path.unlink(missing_ok=True)

    def _evaluate(self, page: PageDescriptor) -> None:
        ratio = score_page(page.source_path)
        keep = should_keep(ratio)
        page.record_decision(ratio, keep)

        if keep:
            self.compressor.process(page)
        else:
            logger.info("Page %s is blank, discarding", page.index)


class WorkerPool:
    """Fixed set of daemon worker threads sharing one HandoffQueue.

    Example:
        >>> pool = WorkerPool(CompressStage(dpi=200), latch, count=3)
        >>> pool.start()
        >>> pool.jobs.submit(page)
        >>> pool.shutdown()   # close the queue and wait for every worker
    """

    def __init__(
        self,
        compressor: Compressor,
        latch: FailureLatch,
        count: int = DEFAULT_WORKERS,
        jobs: HandoffQueue | None = None,
    ):
        if count < 1:
            raise ValueError("Worker pool needs at least one worker")
        self.count = count
        self.jobs = jobs or HandoffQueue()
        self.workers = [PageWorker(i, self.jobs, compressor, latch) for i in range(1, count + 1)]
        self._threads: list[threading.Thread] = []

    def start(self) -> None:
        if self._threads:
            raise RuntimeError("Worker pool already started")
        for worker in self.workers:
            thread = threading.Thread(target=worker.run, name=f"scanpdf-worker-{worker.worker_id}", daemon=True)
            thread.start()
            self._threads.append(thread)
        logger.debug("Started %d workers", self.count)

    def shutdown(self) -> None:
        """Close the queue and wait until every worker has returned."""
        self.jobs.close(len(self._threads))
        for thread in self._threads:
            thread.join()

    @property
    def processed(self) -> int:
        return sum(worker.processed for worker in self.workers)
