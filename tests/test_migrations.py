"""
Schema tests: alembic migrations and ORM table constraints
"""
from decimal import Decimal
from pathlib import Path

import pytest
from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect
from sqlalchemy.exc import IntegrityError

from app.infrastructure.db.models import SubscriptionModel

ROOT = Path(__file__).resolve().parents[1]


def _alembic_config(url: str) -> Config:
    cfg = Config()
    cfg.set_main_option("script_location", str(ROOT / "migrations"))
    cfg.set_main_option("sqlalchemy.url", url)
    return cfg


class TestMigrations:
    def test_upgrade_head_creates_tables(self, tmp_path):
        url = f"sqlite:///{tmp_path / 'subtrack.db'}"
        command.upgrade(_alembic_config(url), "head")

        engine = create_engine(url)
        try:
            tables = set(inspect(engine).get_table_names())
        finally:
            engine.dispose()
        assert {"subscriptions", "user_settings", "alembic_version"} <= tables

    def test_downgrade_drops_tables(self, tmp_path):
        url = f"sqlite:///{tmp_path / 'subtrack.db'}"
        cfg = _alembic_config(url)
        command.upgrade(cfg, "head")
        command.downgrade(cfg, "base")

        engine = create_engine(url)
        try:
            tables = set(inspect(engine).get_table_names())
        finally:
            engine.dispose()
        assert "subscriptions" not in tables
        assert "user_settings" not in tables


class TestModelConstraints:
    def test_negative_cost_rejected(self, db_session):
        db_session.add(SubscriptionModel(name="Bad", cost=Decimal("-1")))
        with pytest.raises(IntegrityError):
            db_session.commit()

    def test_zero_shared_with_rejected(self, db_session):
        db_session.add(SubscriptionModel(name="Bad", cost=Decimal("1"), shared_with=0))
        with pytest.raises(IntegrityError):
            db_session.commit()

    def test_created_at_index(self, db_engine):
        indexes = {ix["name"] for ix in inspect(db_engine).get_indexes("subscriptions")}
        assert "ix_subscriptions_created_at" in indexes
