import pathlib
import sqlite3
from threading import Lock

from pg_inserter.settings import get_settings


class MetricsCollectorStub:
    def add_metric(self, name, value, tag=None):
        pass

    def increment_metric(self, name, increment_value, tag=None):
        pass

    def close(self):
        pass


class MetricsCollector:
    """Counters stored in a local SQLite file.

    A connection may only be used by the thread that opened it, so each
    worker thread creates its own collector.
    """

    __init_db = set()
    __lock = Lock()

    def __init__(self, db_path):
        self.db_path = db_path
        self.conn = sqlite3.connect(db_path, timeout=30)
        self.conn.execute("PRAGMA journal_mode=WAL")
        self.last_values = {}

        with MetricsCollector.__lock:
            if db_path not in MetricsCollector.__init_db:
                self._initialize_db()
                MetricsCollector.__init_db.add(db_path)

    def __del__(self):
        self.close()

    def close(self):
        conn = getattr(self, "conn", None)
        if conn is not None:
            conn.close()
            self.conn = None

    def _initialize_db(self):
        cur = self.conn.cursor()
        query = """
        CREATE TABLE IF NOT EXISTS metrics (
            id INTEGER PRIMARY KEY,
            name TEXT NOT NULL,
            value REAL NOT NULL,
            tag TEXT DEFAULT NULL,
            timestamp DATETIME DEFAULT (strftime('%Y-%m-%d %H:%M:%f', 'now'))
        );
        """
        cur.execute(query)
        cur.execute(
            "CREATE INDEX IF NOT EXISTS idx_name_timestamp ON metrics(name, timestamp);"
        )
        cur.execute(
            "CREATE INDEX IF NOT EXISTS idx_tag ON metrics(tag) WHERE tag is not NULL;"
        )
        self.conn.commit()
        cur.close()

    def add_metric(self, name, value, tag=None):
        cur = self.conn.cursor()
        cur.execute(
            "INSERT INTO metrics (name, value, tag) VALUES (?, ?, ?)",
            (name, value, tag),
        )
        self.conn.commit()
        cur.close()

    def increment_metric(self, name, inc_value, tag=None):
        full_name = name
        if tag is not None:
            full_name = full_name + "_" + tag

        new_value = self.last_values.get(full_name, 0) + inc_value
        self.last_values[full_name] = new_value
        self.add_metric(name, new_value, tag)

    def get_metric_by_tag_and_name(self, tag, name):
        cur = self.conn.cursor()
        query = "SELECT value, timestamp FROM metrics WHERE tag=? and name=?"
        cur.execute(query, (tag, name))
        results = cur.fetchall()
        cur.close()

        timestamps = [timestamp for _, timestamp in results]
        values = [value for value, _ in results]

        return timestamps, values


class MetricsCollectorFactory:
    db_path = None
    disable_metrics = True

    @classmethod
    def initialize(cls):
        settings = get_settings()

        if "metrics_dir" in settings:
            metrics_dir = settings["metrics_dir"]
            metrics_path = pathlib.Path(metrics_dir)
            metrics_path.mkdir(parents=True, exist_ok=True)

            cls.db_path = metrics_dir + "/metrics.db"
            cls.disable_metrics = False
        else:
            cls.db_path = None
            cls.disable_metrics = True

    @classmethod
    def get_instance(cls, db_path=None):
        if db_path is not None:
            return MetricsCollector(db_path)

        if cls.disable_metrics:
            return MetricsCollectorStub()
        else:
            return MetricsCollector(cls.db_path)


def get_metrics_collector(db_path=None):
    return MetricsCollectorFactory.get_instance(db_path)
