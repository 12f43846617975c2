import pytest

import litescan
from litescan.config import Settings
from litescan.errors import FormatError, LiteScanError
from litescan.session import Session


class TestSession:
    def test_page_size(self, fruit_session):
        assert fruit_session.page_size() == 4096

    def test_table_count_includes_every_schema_row(self, fruit_session):
        # apples, sqlite_sequence, carrots and the index
        assert fruit_session.table_count() == 4

    def test_list_tables(self, fruit_session):
        assert fruit_session.list_tables() == ["apples", "carrots"]

    def test_catalog_is_loaded_once(self, fruit_session):
        assert fruit_session.catalog is fruit_session.catalog

    def test_open_is_exported_at_package_level(self, fruit_db):
        with litescan.open(fruit_db) as session:
            assert session.list_tables() == ["apples", "carrots"]

    def test_empty_database(self, make_db):
        path = make_db("PRAGMA user_version = 1;", page_size=1024)
        with Session.open(path) as session:
            assert session.page_size() == 1024
            assert session.table_count() == 0
            assert session.list_tables() == []

    def test_close_releases_the_file(self, fruit_db):
        session = Session.open(fruit_db)
        session.close()
        assert session.database.file.closed


class TestSessionErrors:
    def test_not_a_database(self, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_bytes(b"These are not the pages you are looking for. " * 10)

        with pytest.raises(FormatError) as excinfo:
            Session.open(str(path))
        assert excinfo.value.stage == "header"

    def test_missing_file(self, tmp_path):
        with pytest.raises(OSError):
            Session.open(str(tmp_path / "missing.db"))

    def test_strict_page_size_from_settings(self, fruit_db):
        settings = Settings(strict_page_size=True)
        with Session.open(fruit_db, settings) as session:
            assert session.page_size() == 4096

    def test_errors_share_a_base_class(self, fruit_session):
        with pytest.raises(LiteScanError):
            fruit_session.execute("SELECT name FROM")
