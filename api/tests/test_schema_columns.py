"""Column types of the certificates table, in the models and the migration.

Persisted values are free text of any length; a length cap would turn a
valid create request into a truncation error on PostgreSQL.
"""

import importlib.util
from pathlib import Path

import pytest
import sqlalchemy as sa
from alembic.migration import MigrationContext
from alembic.operations import Operations

from models import Certificate

pytestmark = pytest.mark.unit

MIGRATION = (
    Path(__file__).resolve().parents[1]
    / "alembic"
    / "versions"
    / "0001_create_certificates.py"
)

TEXT_COLUMNS = (
    "id",
    "full_name",
    "email",
    "course",
    "level",
    "signature",
    "registration_number",
    "date",
    "qr_code",
    "expiry_date",
)


def _load_migration():
    module_spec = importlib.util.spec_from_file_location(
        "create_certificates", MIGRATION
    )
    module = importlib.util.module_from_spec(module_spec)
    module_spec.loader.exec_module(module)
    return module


@pytest.mark.parametrize("name", TEXT_COLUMNS)
def test_model_columns_are_unbounded(name):
    column_type = Certificate.__table__.c[name].type
    assert isinstance(column_type, sa.String)
    assert column_type.length is None


def test_migration_columns_are_unbounded():
    migration = _load_migration()
    engine = sa.create_engine("sqlite://")

    with engine.begin() as conn:
        with Operations.context(MigrationContext.configure(conn)):
            migration.upgrade()
        reflected = sa.inspect(conn).get_columns("certificates")
        columns = {col["name"]: col for col in reflected}

    engine.dispose()

    for name in TEXT_COLUMNS:
        assert isinstance(columns[name]["type"], sa.String), name
        assert columns[name]["type"].length is None, name
