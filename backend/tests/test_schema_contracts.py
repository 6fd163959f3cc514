import importlib.util
import inspect
import unittest
from pathlib import Path

from alembic.migration import MigrationContext
from alembic.operations import Operations
from sqlalchemy import create_engine
from sqlalchemy import inspect as inspect_db

from app.db import models
from app.services import auth_service, media_service

MIGRATION_PATH = Path(__file__).resolve().parents[1] / "alembic" / "versions" / "0001_initial_schema.py"


def _load_initial_migration():
    loader_spec = importlib.util.spec_from_file_location("initial_schema", MIGRATION_PATH)
    module = importlib.util.module_from_spec(loader_spec)
    loader_spec.loader.exec_module(module)
    return module


class TestSchemaContracts(unittest.TestCase):
    def setUp(self) -> None:
        self.migration = MIGRATION_PATH.read_text(encoding="utf-8")

    def test_migration_enforces_uniqueness_in_the_database(self) -> None:
        self.assertIn("uq_users_username", self.migration)
        self.assertIn("uq_auth_tokens_token", self.migration)
        self.assertIn("uq_rating_media_user", self.migration)

    def test_migration_checks_media_type_and_stars(self) -> None:
        self.assertIn("chk_media_type", self.migration)
        self.assertIn("chk_rating_stars", self.migration)
        self.assertIn("stars BETWEEN 1 AND 5", self.migration)

    def test_one_token_row_per_user(self) -> None:
        primary_key = [column.name for column in models.AuthToken.__table__.primary_key.columns]
        self.assertEqual(primary_key, ["user_id"])

    def test_pair_tables_use_composite_keys(self) -> None:
        for model, expected in [
            (models.Favorite, {"user_id", "media_id"}),
            (models.RatingLike, {"user_id", "rating_id"}),
        ]:
            with self.subTest(table=model.__tablename__):
                columns = {column.name for column in model.__table__.primary_key.columns}
                self.assertEqual(columns, expected)

    def test_login_replaces_token_atomically(self) -> None:
        source = inspect.getsource(auth_service.issue_session_token)
        self.assertIn("upsert(", source)

    def test_search_escapes_like_wildcards(self) -> None:
        source = inspect.getsource(media_service.apply_media_filters)
        self.assertIn("autoescape=True", source)


class TestInitialMigration(unittest.TestCase):
    def setUp(self) -> None:
        self.engine = create_engine("sqlite://")
        self.migration = _load_initial_migration()

    def tearDown(self) -> None:
        self.engine.dispose()

    def test_migration_has_no_postgres_only_statements(self) -> None:
        source = MIGRATION_PATH.read_text(encoding="utf-8")
        for marker in ["pgcrypto", "gen_random_uuid", "sqlalchemy.dialects.postgresql", "char_length"]:
            with self.subTest(marker=marker):
                self.assertNotIn(marker, source)

    def test_upgrade_matches_models_and_downgrade_drops_everything(self) -> None:
        with self.engine.begin() as conn:
            with Operations.context(MigrationContext.configure(conn)):
                self.migration.upgrade()

            inspector = inspect_db(conn)
            self.assertEqual(set(inspector.get_table_names()), set(models.Base.metadata.tables))
            for name, table in models.Base.metadata.tables.items():
                with self.subTest(table=name):
                    migrated = {column["name"] for column in inspector.get_columns(name)}
                    self.assertEqual(migrated, set(table.columns.keys()))

            with Operations.context(MigrationContext.configure(conn)):
                self.migration.downgrade()
            self.assertEqual(inspect_db(conn).get_table_names(), [])


if __name__ == "__main__":
    unittest.main()
