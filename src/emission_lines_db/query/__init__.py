from emission_lines_db.query.api import QueryAPI, open_default_api
from emission_lines_db.query.engine import LineView, QueryResult, QuerySpec, run_query

__all__ = [
    "LineView",
    "QueryAPI",
    "QueryResult",
    "QuerySpec",
    "open_default_api",
    "run_query",
]
