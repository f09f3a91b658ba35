"""
Query log: the SQL statements executed by an engine, rendered in the top-level "query" node

    with QueryLogger(db.engine) as query_logger:
        countries = db.session.query(Country).all()
    render({"countries": countries, "query_log": query_logger.get_log()})

=> "query": {"default": [{"query": "SELECT ...", "params": [], "took": 0.12, "rows": -1}]}
"""
import time
from typing import Any, Callable, Dict, List, Optional
from sqlalchemy import event
import jsonapi_view

_START_KEY = "_jsonapi_view_query_start"


class QueryLogger:
    """
    Records the statements executed by `engine` using the sqlalchemy cursor execution events
    """

    def __init__(self, engine: Any, name: str = "default", sink: Optional[Callable[[dict], None]] = None) -> None:
        """
        :param engine: sqlalchemy Engine (or Connection)
        :param name: connection name, the key of the entries in the query log
        :param sink: callable receiving the log entries, by default they're kept in `self.entries`
        """
        self.engine = engine
        self.name = name
        self.sink = sink
        self.entries: List[dict] = []
        self.attached = False

    def attach(self) -> "QueryLogger":
        if not self.attached:
            event.listen(self.engine, "before_cursor_execute", self._before_cursor_execute)
            event.listen(self.engine, "after_cursor_execute", self._after_cursor_execute)
            event.listen(self.engine, "handle_error", self._handle_error)
            self.attached = True
        return self

    def detach(self) -> None:
        if self.attached:
            event.remove(self.engine, "before_cursor_execute", self._before_cursor_execute)
            event.remove(self.engine, "after_cursor_execute", self._after_cursor_execute)
            event.remove(self.engine, "handle_error", self._handle_error)
            self.attached = False

    def __enter__(self) -> "QueryLogger":
        return self.attach()

    def __exit__(self, *exc_info) -> None:
        self.detach()

    # pylint: disable=unused-argument,too-many-arguments
    def _before_cursor_execute(self, conn, cursor, statement, parameters, context, executemany) -> None:
        conn.info.setdefault(_START_KEY, []).append(time.perf_counter())

    def _after_cursor_execute(self, conn, cursor, statement, parameters, context, executemany) -> None:
        starts = conn.info.get(_START_KEY)
        took = (time.perf_counter() - starts.pop()) * 1000 if starts else 0.0
        if isinstance(parameters, tuple):
            parameters = list(parameters)
        entry = {"query": statement, "params": parameters, "took": round(took, 3), "rows": cursor.rowcount}
        jsonapi_view.log.debug(f"Query ({entry['took']} ms): {statement}")
        if self.sink is not None:
            self.sink(entry)
        else:
            self.entries.append(entry)

    def _handle_error(self, exception_context) -> None:
        # after_cursor_execute is not called for failed statements
        conn = exception_context.connection
        starts = conn.info.get(_START_KEY) if conn is not None else None
        if starts:
            starts.pop()

    def get_log(self) -> Dict[str, List[dict]]:
        """
        :return: the query log, keyed by connection name
        """
        return {self.name: list(self.entries)}

    def clear(self) -> None:
        self.entries = []
