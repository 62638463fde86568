from .schema import DTYPES, META_DTYPES, QuestionAttemptRow, SessionMeta
from .store import (
    init_store,
    attempt_records,
    validate_records,
    append_attempts,
    upsert_session_meta,
    load_sessions,
    load_all,
    query_trend,
    export_ndjson,
)

__all__ = [
    "DTYPES",
    "META_DTYPES",
    "QuestionAttemptRow",
    "SessionMeta",
    "init_store",
    "attempt_records",
    "validate_records",
    "append_attempts",
    "upsert_session_meta",
    "load_sessions",
    "load_all",
    "query_trend",
    "export_ndjson",
]
