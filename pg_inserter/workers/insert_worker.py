import enum
import logging
import sqlite3
import threading
import typing

from pg_inserter.errors import ExecutionError
from pg_inserter.monitoring.metrics import MetricsCollectorStub, get_metrics_collector
from pg_inserter.settings import GIBBERISH_MODE
from pg_inserter.workers.tables import TableSpec


logger = logging.getLogger(__name__)


class WorkerState(enum.Enum):
    IDLE = "idle"
    RUNNING = "running"
    WAITING = "waiting"
    STOPPED = "stopped"


class WorkerDescriptor(typing.NamedTuple):
    table: TableSpec
    interval_s: typing.Optional[float] = None
    retry_after_s: typing.Optional[float] = None
    mode: str = GIBBERISH_MODE

    @property
    def table_name(self) -> str:
        return self.table.table_name

    @property
    def payload_shape(self) -> typing.Tuple[int, ...]:
        return self.table.payload_shape


class InsertWorker:
    """Runs one task repeatedly until the stop event fires or the task fails.

    With a positive interval the worker waits that long after each
    completed execution; otherwise it loops back immediately. Waits are
    done on the stop event itself, so cancellation cuts them short. An
    execution already in flight is never interrupted.
    """

    def __init__(
        self,
        descriptor: WorkerDescriptor,
        task,
        pool,
        stop_event: threading.Event,
    ):
        self.descriptor = descriptor
        self.task = task
        self.pool = pool
        self.stop_event = stop_event

        self.state = WorkerState.IDLE
        self.executions = 0
        self.failures = 0
        self.last_error: typing.Optional[BaseException] = None

    @property
    def name(self):
        return self.descriptor.table_name

    def describe_cadence(self):
        if self.descriptor.interval_s:
            return f"every {self.descriptor.interval_s} seconds"
        return "with no delay between inserts"

    def _wait(self, seconds) -> bool:
        self.state = WorkerState.WAITING
        return self.stop_event.wait(seconds)

    def _open_metrics(self):
        try:
            return get_metrics_collector()
        except sqlite3.Error as err:
            logger.warning(f"Metrics disabled for '{self.name}' worker: {err}")
            return MetricsCollectorStub()

    def _record(self, metrics, name):
        try:
            metrics.increment_metric(name, 1, self.name)
        except sqlite3.Error as err:
            logger.warning(f"Could not record {name} for '{self.name}': {err}")

    def _handle_failure(self, err, metrics) -> bool:
        """Returns True when the worker should keep going."""
        self.failures += 1
        self.last_error = err
        self._record(metrics, "failed_inserts")

        retry_after_s = self.descriptor.retry_after_s
        if not retry_after_s:
            logger.error(f"Error inserting into '{self.name}' table, worker stops: {err}")
            return False

        logger.error(
            f"Error inserting into '{self.name}' table (will retry in {retry_after_s}s): {err}"
        )
        return not self._wait(retry_after_s)

    def run(self):
        self.state = WorkerState.RUNNING
        logger.info(f"Inserting into '{self.name}' table {self.describe_cadence()}")

        metrics = None
        try:
            metrics = self._open_metrics()

            while not self.stop_event.is_set():
                self.state = WorkerState.RUNNING
                try:
                    self.task.execute(self.pool)
                except ExecutionError as err:
                    if self._handle_failure(err, metrics):
                        continue
                    break

                self.executions += 1
                self._record(metrics, "inserted_rows")
                logger.debug(f"Inserted row into '{self.name}'")

                if self.descriptor.interval_s and self._wait(self.descriptor.interval_s):
                    break

        except Exception as err:
            self.failures += 1
            self.last_error = err
            logger.exception(f"Unexpected error in '{self.name}' worker, worker stops: {err}")

        finally:
            self.state = WorkerState.STOPPED
            if metrics is not None:
                try:
                    metrics.close()
                except sqlite3.Error as err:
                    logger.warning(f"Could not close metrics for '{self.name}': {err}")
            logger.info(
                f"Worker '{self.name}' stopped after {self.executions} executions"
            )
