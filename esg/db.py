from __future__ import annotations

import sqlite3
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

from esg.config import get_settings
from esg.errors import PersistenceError
from esg.extract.schema import GoalCandidate, IndicatorCandidate
from esg.ingest.schema import ChapterRecord, ReportRecord, ReportStatus

# ---------- connection / schema ----------

_SCHEMA = [
    """
    CREATE TABLE IF NOT EXISTS reports (
      id           TEXT PRIMARY KEY,
      company_id   TEXT NOT NULL,
      title        TEXT NOT NULL,
      year         INTEGER,
      source_path  TEXT NOT NULL,
      status       TEXT NOT NULL DEFAULT 'pending',
      total_pages  INTEGER,
      error        TEXT,
      created_at   TEXT DEFAULT (datetime('now')),
      updated_at   TEXT DEFAULT (datetime('now'))
    );
    """,
    # chapters: one row per detected chapter, written once
    """
    CREATE TABLE IF NOT EXISTS chapters (
      id               TEXT PRIMARY KEY,
      report_id        TEXT NOT NULL,
      seq              INTEGER NOT NULL,
      number           TEXT NOT NULL,
      title            TEXT NOT NULL,
      start_page       INTEGER NOT NULL,
      end_page         INTEGER,
      content          TEXT NOT NULL DEFAULT '',
      chapter_type     TEXT NOT NULL,
      content_summary  TEXT NOT NULL DEFAULT '',
      FOREIGN KEY (report_id) REFERENCES reports(id) ON DELETE CASCADE
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS indicators (
      id             TEXT PRIMARY KEY,
      report_id      TEXT NOT NULL,
      standard_code  TEXT NOT NULL,
      category       TEXT NOT NULL,
      name           TEXT NOT NULL,
      value          TEXT,
      unit           TEXT,
      page           INTEGER,
      context        TEXT,
      FOREIGN KEY (report_id) REFERENCES reports(id) ON DELETE CASCADE
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS goals (
      id           TEXT PRIMARY KEY,
      report_id    TEXT NOT NULL,
      company_id   TEXT,
      category     TEXT NOT NULL,
      title        TEXT NOT NULL,
      description  TEXT NOT NULL,
      target_year  INTEGER,
      page         INTEGER,
      status       TEXT NOT NULL,
      FOREIGN KEY (report_id) REFERENCES reports(id) ON DELETE CASCADE
    );
    """,
]


def db_path_default() -> Path:
    return get_settings().db_path


def connect(db_path: Optional[Path] = None) -> sqlite3.Connection:
    db = db_path or db_path_default()
    db.parent.mkdir(parents=True, exist_ok=True)
    con = sqlite3.connect(str(db))
    con.row_factory = sqlite3.Row
    con.execute("PRAGMA foreign_keys = ON;")
    return con


def init_db(db_path: Optional[Path] = None) -> Path:
    con = connect(db_path)
    try:
        for stmt in _SCHEMA:
            con.execute(stmt)
        con.commit()
    finally:
        con.close()
    return db_path or db_path_default()


def new_id() -> str:
    return uuid.uuid4().hex


# ---------- store ----------


class ReportStore:
    """
    Record-oriented SQLite store for reports, chapters, indicators and goals.
    Every call opens and closes its own connection; sqlite3 errors surface as
    PersistenceError.
    """

    def __init__(self, db_path: Optional[Path] = None):
        self.db_path = init_db(db_path)

    @contextmanager
    def _tx(self) -> Iterator[sqlite3.Connection]:
        try:
            con = connect(self.db_path)
        except sqlite3.Error as e:
            raise PersistenceError(f"cannot open {self.db_path}: {e}") from e
        try:
            yield con
            con.commit()
        except sqlite3.Error as e:
            con.rollback()
            raise PersistenceError(str(e)) from e
        finally:
            con.close()

    # ----- reports -----

    def create_report(
        self,
        *,
        company_id: str,
        title: str,
        source_path: Path,
        year: Optional[int] = None,
    ) -> ReportRecord:
        rec = ReportRecord(
            id=new_id(),
            company_id=company_id,
            title=title,
            year=year,
            source_path=str(source_path),
        )
        with self._tx() as con:
            con.execute(
                """
                INSERT INTO reports (id, company_id, title, year, source_path, status)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (rec.id, rec.company_id, rec.title, rec.year, rec.source_path, rec.status),
            )
        return rec

    def get_report(self, report_id: str) -> Optional[ReportRecord]:
        with self._tx() as con:
            row = con.execute(
                """
                SELECT id, company_id, title, year, source_path, status, total_pages, error
                FROM reports WHERE id = ?
                """,
                (report_id,),
            ).fetchone()
        return ReportRecord(**dict(row)) if row else None

    def update_report_status(
        self, report_id: str, status: ReportStatus, error: Optional[str] = None
    ) -> None:
        with self._tx() as con:
            con.execute(
                """
                UPDATE reports SET status = ?, error = ?, updated_at = datetime('now')
                WHERE id = ?
                """,
                (status, error, report_id),
            )

    def update_report_pages(self, report_id: str, total_pages: int) -> None:
        with self._tx() as con:
            con.execute(
                "UPDATE reports SET total_pages = ?, updated_at = datetime('now') WHERE id = ?",
                (total_pages, report_id),
            )

    def list_reports(self) -> List[ReportRecord]:
        with self._tx() as con:
            rows = con.execute(
                """
                SELECT id, company_id, title, year, source_path, status, total_pages, error
                FROM reports ORDER BY company_id, year, title
                """
            ).fetchall()
        return [ReportRecord(**dict(r)) for r in rows]

    # ----- chapters -----

    def create_chapter(
        self,
        report_id: str,
        *,
        seq: int,
        number: str,
        title: str,
        start_page: int,
        end_page: Optional[int],
        content: str,
        chapter_type: str,
        content_summary: str,
    ) -> ChapterRecord:
        rec = ChapterRecord(
            id=new_id(),
            report_id=report_id,
            number=number,
            title=title,
            start_page=start_page,
            end_page=end_page,
            content=content,
            chapter_type=chapter_type,
            content_summary=content_summary,
        )
        with self._tx() as con:
            con.execute(
                """
                INSERT INTO chapters
                  (id, report_id, seq, number, title, start_page, end_page,
                   content, chapter_type, content_summary)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    rec.id,
                    rec.report_id,
                    seq,
                    rec.number,
                    rec.title,
                    rec.start_page,
                    rec.end_page,
                    rec.content,
                    rec.chapter_type,
                    rec.content_summary,
                ),
            )
        return rec

    def find_chapters_by_report(self, report_id: str) -> List[ChapterRecord]:
        with self._tx() as con:
            rows = con.execute(
                """
                SELECT id, report_id, number, title, start_page, end_page,
                       content, chapter_type, content_summary
                FROM chapters WHERE report_id = ? ORDER BY seq
                """,
                (report_id,),
            ).fetchall()
        return [ChapterRecord(**dict(r)) for r in rows]

    # ----- indicators & goals -----

    def create_indicator(self, report_id: str, ind: IndicatorCandidate) -> str:
        iid = new_id()
        with self._tx() as con:
            con.execute(
                """
                INSERT INTO indicators
                  (id, report_id, standard_code, category, name, value, unit, page, context)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    iid,
                    report_id,
                    ind.standard_code,
                    ind.category,
                    ind.name,
                    ind.value,
                    ind.unit,
                    ind.page,
                    ind.context,
                ),
            )
        return iid

    def create_goal(self, report_id: str, goal: GoalCandidate) -> str:
        gid = new_id()
        with self._tx() as con:
            con.execute(
                """
                INSERT INTO goals
                  (id, report_id, company_id, category, title, description,
                   target_year, page, status)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    gid,
                    report_id,
                    goal.company_id,
                    goal.category,
                    goal.title,
                    goal.description,
                    goal.target_year,
                    goal.page,
                    goal.status,
                ),
            )
        return gid

    # ---------- queries for UI / CLI ----------

    def get_indicators_for_report(self, report_id: str) -> List[Dict[str, Any]]:
        with self._tx() as con:
            rows = con.execute(
                """
                SELECT standard_code, category, name, value, unit, page, context
                FROM indicators WHERE report_id = ? ORDER BY page, standard_code, name
                """,
                (report_id,),
            ).fetchall()
        return [dict(r) for r in rows]

    def get_goals_for_report(self, report_id: str) -> List[Dict[str, Any]]:
        with self._tx() as con:
            rows = con.execute(
                """
                SELECT category, title, description, target_year, page, status
                FROM goals WHERE report_id = ? ORDER BY page, title
                """,
                (report_id,),
            ).fetchall()
        return [dict(r) for r in rows]
