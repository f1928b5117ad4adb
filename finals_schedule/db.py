# finals_schedule/db.py
from __future__ import annotations

import os
from typing import Optional

from dotenv import load_dotenv
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL")


def make_engine(url: Optional[str] = None) -> Engine:
    url = url or DATABASE_URL
    if not url:
        raise RuntimeError("DATABASE_URL is not set. Set it to your SQLAlchemy database URL.")

    if not url.startswith("sqlite"):
        return create_engine(url, future=True)

    engine = create_engine(url, future=True, connect_args={"check_same_thread": False})

    # pysqlite defers BEGIN on its own, which breaks SAVEPOINT; emit BEGIN ourselves
    @event.listens_for(engine, "connect")
    def _disable_pysqlite_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")

    return engine


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)

