import json
import os
import sqlite3
from datetime import datetime, timezone

from app.core.config import settings
from app.core.models import Analysis, Document, User

# JSON-encoded columns holding analysis output
_JSON_FIELDS = (
    "sections",
    "key_points",
    "questions_answered",
    "conclusions",
    "entities",
    "relationships",
    "timeline",
)

_DOC_COLUMNS = (
    "id, user_id, filename, file_type, file_size, status, doc_type, summary, "
    + ", ".join(f"{f}_json" for f in _JSON_FIELDS)
    + ", raw_text, error_message, created_at, updated_at"
)


def _connect() -> sqlite3.Connection:
    conn = sqlite3.connect(settings.DB_PATH)
    conn.row_factory = sqlite3.Row
    return conn


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def init_db():
    os.makedirs(os.path.dirname(os.path.abspath(settings.DB_PATH)), exist_ok=True)
    conn = _connect()
    cur = conn.cursor()
    cur.execute("""
    CREATE TABLE IF NOT EXISTS users(
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        email TEXT NOT NULL UNIQUE,
        name TEXT NOT NULL,
        password_digest TEXT,
        session_token TEXT,
        created_at TEXT NOT NULL
    );
    """)
    cur.execute("""
    CREATE TABLE IF NOT EXISTS documents(
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        user_id INTEGER,
        filename TEXT NOT NULL,
        file_type TEXT NOT NULL,
        file_size INTEGER DEFAULT 0,
        status TEXT NOT NULL DEFAULT 'pending',
        doc_type TEXT,
        summary TEXT,
        sections_json TEXT DEFAULT '[]',
        key_points_json TEXT DEFAULT '[]',
        questions_answered_json TEXT DEFAULT '[]',
        conclusions_json TEXT DEFAULT '[]',
        entities_json TEXT DEFAULT '{}',
        relationships_json TEXT DEFAULT '[]',
        timeline_json TEXT DEFAULT '[]',
        raw_text TEXT,
        search_tokens TEXT,
        error_message TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        FOREIGN KEY(user_id) REFERENCES users(id)
    );
    """)
    cur.execute("CREATE INDEX IF NOT EXISTS idx_documents_user ON documents(user_id);")
    cur.execute("CREATE INDEX IF NOT EXISTS idx_documents_status ON documents(status);")
    cur.execute("CREATE INDEX IF NOT EXISTS idx_documents_created ON documents(created_at);")
    cur.execute("CREATE UNIQUE INDEX IF NOT EXISTS idx_users_token ON users(session_token);")
    conn.commit()
    conn.close()


def _row_to_document(row: sqlite3.Row) -> Document:
    data = {
        "id": row["id"],
        "user_id": row["user_id"],
        "filename": row["filename"],
        "file_type": row["file_type"],
        "file_size": row["file_size"] or 0,
        "status": row["status"],
        "doc_type": row["doc_type"],
        "summary": row["summary"],
        "raw_text": row["raw_text"],
        "error_message": row["error_message"],
        "created_at": row["created_at"],
        "updated_at": row["updated_at"],
    }
    for f in _JSON_FIELDS:
        data[f] = json.loads(row[f"{f}_json"] or "null")
    return Document(**data)


def _scope_sql(user_id: int | None) -> tuple[str, tuple]:
    # user_id=None means unscoped
    if user_id is None:
        return "", ()
    return " AND user_id=?", (user_id,)


def create_document(user_id: int | None, filename: str, file_type: str, file_size: int = 0,
                    status: str = "pending") -> Document:
    now = _now()
    conn = _connect()
    cur = conn.cursor()
    cur.execute(
        "INSERT INTO documents(user_id, filename, file_type, file_size, status, created_at, updated_at) "
        "VALUES(?,?,?,?,?,?,?)",
        (user_id, filename, file_type, file_size, status, now, now),
    )
    doc_id = cur.lastrowid
    conn.commit()
    conn.close()
    return get_document(doc_id)


def get_document(doc_id: int, user_id: int | None = None) -> Document | None:
    scope, params = _scope_sql(user_id)
    conn = _connect()
    cur = conn.cursor()
    cur.execute(f"SELECT {_DOC_COLUMNS} FROM documents WHERE id=?{scope}", (doc_id, *params))
    row = cur.fetchone()
    conn.close()
    return _row_to_document(row) if row else None


def get_documents(doc_ids: list[int]) -> list[Document]:
    """Fetch documents by id, returned in the order of `doc_ids`."""
    if not doc_ids:
        return []
    marks = ",".join("?" for _ in doc_ids)
    conn = _connect()
    cur = conn.cursor()
    cur.execute(f"SELECT {_DOC_COLUMNS} FROM documents WHERE id IN ({marks})", tuple(doc_ids))
    rows = cur.fetchall()
    conn.close()
    by_id = {r["id"]: _row_to_document(r) for r in rows}
    return [by_id[i] for i in doc_ids if i in by_id]


def list_documents(user_id: int | None, status: str | None = "completed", doc_type: str | None = None,
                   oldest_first: bool = False, limit: int | None = None) -> list[Document]:
    scope, params = _scope_sql(user_id)
    sql = f"SELECT {_DOC_COLUMNS} FROM documents WHERE 1=1{scope}"
    if status:
        sql += " AND status=?"
        params += (status,)
    if doc_type:
        sql += " AND doc_type=?"
        params += (doc_type,)
    order = "ASC" if oldest_first else "DESC"
    sql += f" ORDER BY created_at {order}, id {order}"
    if limit is not None:
        sql += " LIMIT ?"
        params += (limit,)
    conn = _connect()
    cur = conn.cursor()
    cur.execute(sql, params)
    rows = cur.fetchall()
    conn.close()
    return [_row_to_document(r) for r in rows]


def list_search_rows(user_id: int | None) -> list[tuple[int, list[str]]]:
    """(id, search tokens) for every completed document in scope, newest first.

    Documents whose index was never built come back with an empty token list.
    """
    scope, params = _scope_sql(user_id)
    conn = _connect()
    cur = conn.cursor()
    cur.execute(
        f"SELECT id, search_tokens FROM documents WHERE status='completed'{scope} "
        "ORDER BY created_at DESC, id DESC",
        params,
    )
    rows = cur.fetchall()
    conn.close()
    return [(r["id"], (r["search_tokens"] or "").split()) for r in rows]


def update_document(doc_id: int, **fields) -> None:
    """Update plain columns (status, raw_text, error_message, ...) of a document."""
    if not fields:
        return
    fields["updated_at"] = _now()
    cols = ", ".join(f"{k}=?" for k in fields)
    conn = _connect()
    cur = conn.cursor()
    cur.execute(f"UPDATE documents SET {cols} WHERE id=?", (*fields.values(), doc_id))
    conn.commit()
    conn.close()


def save_analysis(doc_id: int, analysis: Analysis, status: str = "completed") -> None:
    data = analysis.model_dump()
    fields = {
        "doc_type": data["doc_type"],
        "summary": data["summary"],
        "status": status,
        "error_message": None,
    }
    for f in _JSON_FIELDS:
        fields[f"{f}_json"] = json.dumps(data[f])
    update_document(doc_id, **fields)


def save_search_tokens(doc_id: int, tokens: list[str]) -> None:
    conn = _connect()
    cur = conn.cursor()
    cur.execute("UPDATE documents SET search_tokens=? WHERE id=?", (" ".join(tokens), doc_id))
    conn.commit()
    conn.close()


def delete_document(doc_id: int, user_id: int | None = None) -> bool:
    scope, params = _scope_sql(user_id)
    conn = _connect()
    cur = conn.cursor()
    cur.execute(f"DELETE FROM documents WHERE id=?{scope}", (doc_id, *params))
    deleted = cur.rowcount > 0
    conn.commit()
    conn.close()
    return deleted


# users

def _row_to_user(row: sqlite3.Row) -> User:
    return User(id=row["id"], email=row["email"], name=row["name"], created_at=row["created_at"])


def create_user(email: str, name: str, password_digest: str | None) -> User:
    conn = _connect()
    cur = conn.cursor()
    try:
        cur.execute(
            "INSERT INTO users(email, name, password_digest, created_at) VALUES(?,?,?,?)",
            (email, name, password_digest, _now()),
        )
        user_id = cur.lastrowid
        conn.commit()
    finally:
        conn.close()
    return get_user(user_id)


def get_user(user_id: int) -> User | None:
    conn = _connect()
    cur = conn.cursor()
    cur.execute("SELECT id, email, name, created_at FROM users WHERE id=?", (user_id,))
    row = cur.fetchone()
    conn.close()
    return _row_to_user(row) if row else None


def get_user_credentials(email: str) -> tuple[User, str | None] | None:
    conn = _connect()
    cur = conn.cursor()
    cur.execute("SELECT id, email, name, created_at, password_digest FROM users WHERE email=?", (email,))
    row = cur.fetchone()
    conn.close()
    if not row:
        return None
    return _row_to_user(row), row["password_digest"]


def get_user_by_token(token: str) -> User | None:
    conn = _connect()
    cur = conn.cursor()
    cur.execute("SELECT id, email, name, created_at FROM users WHERE session_token=?", (token,))
    row = cur.fetchone()
    conn.close()
    return _row_to_user(row) if row else None


def set_session_token(user_id: int, token: str | None) -> None:
    conn = _connect()
    cur = conn.cursor()
    cur.execute("UPDATE users SET session_token=? WHERE id=?", (token, user_id))
    conn.commit()
    conn.close()
