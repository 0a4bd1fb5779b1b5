from sqlalchemy import inspect
from sqlalchemy.orm import Session

from newscards.core.database import Base, create_tables, engine, get_db


class TestDatabase:
    def test_sqlite_engine_from_settings(self):
        assert engine.dialect.name == "sqlite"

    def test_create_tables_registers_models(self):
        create_tables()

        assert {"posts", "tags", "post_tags", "queue_items", "twitter_sources", "rss_sources"} <= set(Base.metadata.tables)
        assert "queue_items" in inspect(engine).get_table_names()

    def test_get_db_yields_session(self):
        generator = get_db()
        db = next(generator)

        assert isinstance(db, Session)
        generator.close()
