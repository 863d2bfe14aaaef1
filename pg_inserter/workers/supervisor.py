import logging
import threading
import typing

from pg_inserter.settings import REALISTIC_MODE, CategorySettings
from pg_inserter.utils.generate_data import RandomPayloadGenerator, RealisticPayloadGenerator
from pg_inserter.workers.insert_task import InsertTask
from pg_inserter.workers.insert_worker import InsertWorker, WorkerDescriptor
from pg_inserter.workers.tables import CATEGORY_TABLES


logger = logging.getLogger(__name__)

JOIN_POLL_S = 0.5


def build_descriptors(
    configuration: typing.Dict[str, CategorySettings],
) -> typing.List[WorkerDescriptor]:
    descriptors = []
    for category, category_settings in configuration.items():
        if not category_settings.enabled:
            continue

        for table in CATEGORY_TABLES[category]:
            descriptors.append(
                WorkerDescriptor(
                    table=table,
                    interval_s=category_settings.interval_seconds,
                    retry_after_s=category_settings.retry_after_seconds,
                    mode=category_settings.mode,
                )
            )
    return descriptors


def build_task(descriptor: WorkerDescriptor) -> InsertTask:
    # a fresh generator per worker, never shared across threads
    if descriptor.mode == REALISTIC_MODE:
        generator = RealisticPayloadGenerator()
    else:
        generator = RandomPayloadGenerator()
    return InsertTask(descriptor.table, generator)


class WorkerSupervisor:
    def __init__(self, task_factory: typing.Callable = build_task):
        self.task_factory = task_factory
        self.workers: typing.List[InsertWorker] = []
        self.threads: typing.List[threading.Thread] = []

    def launch(self, configuration, pool, stop_event: threading.Event):
        try:
            for descriptor in build_descriptors(configuration):
                worker = InsertWorker(descriptor, self.task_factory(descriptor), pool, stop_event)
                thread = threading.Thread(
                    target=worker.run, name=f"insert-{worker.name}", daemon=True
                )
                self.workers.append(worker)
                self.threads.append(thread)
                thread.start()
        except Exception as err:
            logger.error(f"Failed to start insert workers: {err}")
            stop_event.set()
            self.wait()
            raise

    def wait(self):
        # short joins keep the main thread free to run signal handlers
        for thread in self.threads:
            while thread.is_alive():
                thread.join(JOIN_POLL_S)

    def run(self, configuration, pool, stop_event: threading.Event) -> typing.List[InsertWorker]:
        self.launch(configuration, pool, stop_event)

        if not self.workers:
            logger.info("No insert categories enabled, nothing to run")
            return []

        logger.info(f"Started {len(self.workers)} insert workers. Press Ctrl+C to stop.")
        self.wait()

        failed = [worker.name for worker in self.workers if worker.last_error is not None]
        if failed:
            logger.warning(f"Workers stopped after errors: {', '.join(failed)}")
        logger.info("All insert workers stopped")

        return self.workers


def run(configuration, pool, stop_event: threading.Event) -> typing.List[InsertWorker]:
    return WorkerSupervisor().run(configuration, pool, stop_event)
