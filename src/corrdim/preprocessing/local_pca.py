"""
Local PCA preprocessing.

`LocalPCAPreprocessor` visits every object of a database exactly once,
fetches its neighborhood, runs a `LocalPCA` on it and annotates the object
with

    correlation-dimensionality   int
    strong-eigenvector-matrix    (d, k) array
    neighbor-list                list of neighbor ids
    local-pca                    the full LocalPCAResult

Objects are independent of each other, so with `n_jobs > 1` they are
processed on a thread pool, one task per object. Failures stay local to
their object:

  - an empty neighborhood skips the object (logged, `report.skipped`),
  - a neighborhood query that overruns `query_timeout` is retried up to
    `max_retries` times, then the object is marked failed (`report.failed`),
  - any other error raised by the query or the PCA marks the object failed
    and is logged with its traceback.

Configuration errors and invalid-state errors (annotation conflicts among
them) abort the run. Timed queries run on daemon threads; an abandoned
query keeps its thread until it returns but does not block interpreter exit.

A `threading.Event` passed as `cancel` is checked before each object; once
set, objects that have not started are reported in `report.cancelled`.
"""

from __future__ import annotations

import concurrent.futures
import logging
import os
import threading
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Dict, Hashable, List, Optional, Tuple

from ..exceptions import (
    ConfigurationError,
    DegenerateNeighborhoodError,
    InvalidStateError,
    NeighborhoodTimeoutError,
)
from ..pca.runner import LocalPCA
from .store import (
    LOCAL_DIMENSIONALITY,
    LOCAL_PCA,
    NEIGHBORS,
    STRONG_EIGENVECTOR_MATRIX,
    AnnotationStore,
)

if TYPE_CHECKING:
    from ..neighbors import NeighborhoodSource

logger = logging.getLogger(__name__)

__all__ = ["LocalPCAPreprocessor", "PreprocessingReport"]

PROCESSED, SKIPPED, FAILED, CANCELLED = "processed", "skipped", "failed", "cancelled"


@dataclass
class PreprocessingReport:
    store: AnnotationStore
    total: int = 0
    processed: List[Hashable] = field(default_factory=list)
    skipped: Dict[Hashable, str] = field(default_factory=dict)
    failed: Dict[Hashable, str] = field(default_factory=dict)
    cancelled: List[Hashable] = field(default_factory=list)

    @property
    def was_cancelled(self) -> bool:
        return len(self.cancelled) > 0

    def summary(self) -> str:
        return (
            f"{len(self.processed)}/{self.total} processed, {len(self.skipped)} skipped, "
            f"{len(self.failed)} failed, {len(self.cancelled)} cancelled"
        )


@dataclass
class LocalPCAPreprocessor:
    """
    Runs a local PCA for every object of a database.

    Parameters
    ----------
    neighborhood : source of the neighbor ids of each object
    pca : the local PCA runner (default: LocalPCA()); without its own
          representation it takes the one a bound neighborhood distance uses
    n_jobs : worker threads; 1 runs inline, -1 uses one per CPU
    query_timeout : seconds allowed per neighborhood query (None: no limit)
    max_retries : extra attempts after a timed-out query
    """

    neighborhood: NeighborhoodSource
    pca: LocalPCA = field(default_factory=LocalPCA)
    n_jobs: int = 1
    query_timeout: Optional[float] = None
    max_retries: int = 0

    def __post_init__(self):
        if self.n_jobs == -1:
            self.n_jobs = os.cpu_count() or 1
        if int(self.n_jobs) != self.n_jobs or self.n_jobs < 1:
            raise ConfigurationError(f"n_jobs must be >= 1 or -1; got {self.n_jobs}")
        if self.query_timeout is not None and not self.query_timeout > 0:
            raise ConfigurationError(f"query_timeout must be > 0; got {self.query_timeout}")
        if int(self.max_retries) != self.max_retries or self.max_retries < 0:
            raise ConfigurationError(f"max_retries must be an integer >= 0; got {self.max_retries}")
        # a neighborhood bound to one representation analyzes that representation too
        bound = getattr(getattr(self.neighborhood, "distance", None), "representation", None)
        if self.pca.representation is None and bound is not None:
            self.pca = replace(self.pca, representation=bound)

    # =========================
    # Driver
    # =========================
    def run(
        self,
        database,
        store: Optional[AnnotationStore] = None,
        cancel: Optional[threading.Event] = None,
    ) -> PreprocessingReport:
        store = store if store is not None else AnnotationStore()
        report = PreprocessingReport(store=store, total=len(database))
        ids = list(database)

        if self.n_jobs == 1:
            outcomes = [self._process(pid, database, store, cancel) for pid in ids]
        else:
            with concurrent.futures.ThreadPoolExecutor(
                max_workers=self.n_jobs, thread_name_prefix="corrdim-pca"
            ) as pool:
                futures = [pool.submit(self._process, pid, database, store, cancel) for pid in ids]
                outcomes = [f.result() for f in futures]

        for pid, (status, message) in zip(ids, outcomes):
            if status == PROCESSED:
                report.processed.append(pid)
            elif status == SKIPPED:
                report.skipped[pid] = message
            elif status == FAILED:
                report.failed[pid] = message
            else:
                report.cancelled.append(pid)

        logger.info("local PCA preprocessing: %s", report.summary())
        return report

    # =========================
    # Per-object task
    # =========================
    def _process(self, point_id, database, store, cancel) -> Tuple[str, str]:
        if cancel is not None and cancel.is_set():
            return CANCELLED, ""
        try:
            neighbor_ids = self._query(point_id)
            result = self.pca.analyze(neighbor_ids, database)
        except DegenerateNeighborhoodError as e:
            logger.warning("object %r skipped: %s", point_id, e)
            return SKIPPED, str(e)
        except NeighborhoodTimeoutError as e:
            logger.warning("object %r failed: %s", point_id, e)
            return FAILED, str(e)
        except (ConfigurationError, InvalidStateError):
            raise
        except Exception as e:
            logger.exception("object %r failed", point_id)
            return FAILED, f"{type(e).__name__}: {e}"

        store.put_many(point_id, {
            LOCAL_DIMENSIONALITY: result.correlation_dimensionality,
            STRONG_EIGENVECTOR_MATRIX: result.strong_eigenvectors,
            NEIGHBORS: list(neighbor_ids),
            LOCAL_PCA: result,
        })
        logger.debug("object %r: correlation dimensionality %d", point_id, result.correlation_dimensionality)
        return PROCESSED, ""

    def _query(self, point_id) -> List[Hashable]:
        if self.query_timeout is None:
            return list(self.neighborhood.neighbors(point_id))

        attempts = self.max_retries + 1
        for attempt in range(1, attempts + 1):
            done, outcome = self._query_once(point_id)
            if done:
                return outcome
            logger.debug("neighborhood query for %r timed out (attempt %d/%d)", point_id, attempt, attempts)
        raise NeighborhoodTimeoutError(
            f"Neighborhood query exceeded {self.query_timeout}s in {attempts} attempt(s)."
        )

    def _query_once(self, point_id) -> Tuple[bool, Optional[List[Hashable]]]:
        # a daemon thread per attempt: an abandoned hung query neither delays
        # the next attempt nor keeps the interpreter from exiting
        box = {}

        def target():
            try:
                box["result"] = list(self.neighborhood.neighbors(point_id))
            except Exception as e:
                box["error"] = e

        worker = threading.Thread(target=target, name=f"corrdim-query-{point_id}", daemon=True)
        worker.start()
        worker.join(self.query_timeout)
        if worker.is_alive():
            return False, None
        if "error" in box:
            raise box["error"]
        return True, box["result"]
