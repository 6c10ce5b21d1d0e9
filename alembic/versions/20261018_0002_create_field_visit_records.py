"""create field visit record tables

Revision ID: 20261018_0002
Revises: 20261018_0001
Create Date: 2026-10-18 09:30:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "20261018_0002"
down_revision = "20261018_0001"
branch_labels = None
depends_on = None


def _jsonb() -> postgresql.JSONB:
    return postgresql.JSONB(astext_type=sa.Text())


def _visit_columns() -> list[sa.Column]:
    return [
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("serial_no", sa.String(length=64), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("client_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("supervisor", sa.String(length=255), nullable=True),
        sa.Column("vehicle_no", sa.String(length=64), nullable=True),
        sa.Column("holding_code", sa.String(length=64), nullable=True),
        sa.Column("coordinates", _jsonb(), nullable=True),
        sa.Column("remarks", sa.Text(), nullable=False),
        sa.Column("custom_import_data", _jsonb(), nullable=True),
        sa.Column("created_by", sa.String(length=64), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    ]


def _request_columns() -> list[sa.Column]:
    return [
        sa.Column("request", _jsonb(), nullable=True),
        sa.Column("request_situation", sa.String(length=32), nullable=True),
    ]


def _visit_constraints() -> list[sa.Constraint]:
    return [
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["client_id"], ["clients.id"], ondelete="RESTRICT"),
    ]


def _create_visit_indexes(table: str, *, tracks_request: bool) -> None:
    op.create_index(f"ix_{table}_serial_no", table, ["serial_no"], unique=False)
    op.create_index(f"ix_{table}_date", table, ["date"], unique=False)
    op.create_index(f"ix_{table}_client_id", table, ["client_id"], unique=False)
    if tracks_request:
        op.create_index(f"ix_{table}_request_situation", table, ["request_situation"], unique=False)


def _drop_visit_indexes(table: str, *, tracks_request: bool) -> None:
    if tracks_request:
        op.drop_index(f"ix_{table}_request_situation", table_name=table)
    op.drop_index(f"ix_{table}_client_id", table_name=table)
    op.drop_index(f"ix_{table}_date", table_name=table)
    op.drop_index(f"ix_{table}_serial_no", table_name=table)


_DOMAIN_INDEXES: dict[str, list[tuple[str, str]]] = {
    "vaccination_records": [
        ("ix_vaccination_records_vaccine_category", "vaccine_category"),
        ("ix_vaccination_records_herd_health", "herd_health"),
    ],
    "parasite_control_records": [
        ("ix_parasite_control_records_insecticide_status", "insecticide_status"),
        ("ix_parasite_control_records_herd_health_status", "herd_health_status"),
        ("ix_parasite_control_records_compliance", "complying_to_instructions"),
    ],
    "mobile_clinic_records": [
        ("ix_mobile_clinic_records_intervention_category", "intervention_category"),
    ],
    "equine_health_records": [
        ("ix_equine_health_records_intervention_category", "intervention_category"),
    ],
    "laboratory_records": [
        ("ix_laboratory_records_sample_code", "sample_code"),
        ("ix_laboratory_records_sample_type", "sample_type"),
    ],
}


def upgrade() -> None:
    op.create_table(
        "vaccination_records",
        *_visit_columns(),
        *_request_columns(),
        sa.Column("farm_location", sa.String(length=255), nullable=False),
        sa.Column("team", sa.String(length=255), nullable=True),
        sa.Column("vaccine_type", sa.String(length=255), nullable=True),
        sa.Column("vaccine_category", sa.String(length=32), nullable=False),
        sa.Column("herd_counts", _jsonb(), nullable=False),
        sa.Column("herd_health", sa.String(length=32), nullable=False),
        sa.Column("animals_handling", sa.String(length=32), nullable=False),
        sa.Column("labours", sa.String(length=32), nullable=False),
        sa.Column("reachable_location", sa.String(length=32), nullable=False),
        *_visit_constraints(),
    )

    op.create_table(
        "parasite_control_records",
        *_visit_columns(),
        *_request_columns(),
        sa.Column("herd_location", sa.String(length=255), nullable=False),
        sa.Column("herd_counts", _jsonb(), nullable=False),
        sa.Column("insecticide", _jsonb(), nullable=False),
        sa.Column("insecticide_status", sa.String(length=32), nullable=False),
        sa.Column("animal_barn_size_sqm", sa.Integer(), nullable=False),
        sa.Column("breeding_sites", sa.String(length=255), nullable=False),
        sa.Column("parasite_control_volume", sa.Integer(), nullable=False),
        sa.Column("parasite_control_status", sa.String(length=64), nullable=False),
        sa.Column("herd_health_status", sa.String(length=32), nullable=False),
        sa.Column("complying_to_instructions", sa.String(length=32), nullable=False),
        *_visit_constraints(),
    )

    op.create_table(
        "mobile_clinic_records",
        *_visit_columns(),
        *_request_columns(),
        sa.Column("farm_location", sa.String(length=255), nullable=False),
        sa.Column("animal_counts", _jsonb(), nullable=False),
        sa.Column("diagnosis", sa.Text(), nullable=False),
        sa.Column("intervention_category", sa.String(length=32), nullable=False),
        sa.Column("treatment", sa.Text(), nullable=False),
        sa.Column("medications_used", _jsonb(), nullable=False),
        sa.Column("follow_up_required", sa.Boolean(), nullable=False),
        sa.Column("follow_up_date", sa.Date(), nullable=True),
        *_visit_constraints(),
    )

    op.create_table(
        "equine_health_records",
        *_visit_columns(),
        *_request_columns(),
        sa.Column("farm_location", sa.String(length=255), nullable=False),
        sa.Column("horse_count", sa.Integer(), nullable=False),
        sa.Column("horse_details", _jsonb(), nullable=False),
        sa.Column("diagnosis", sa.Text(), nullable=False),
        sa.Column("intervention_category", sa.String(length=32), nullable=False),
        sa.Column("intervention_categories", _jsonb(), nullable=False),
        sa.Column("treatment", sa.Text(), nullable=False),
        sa.Column("medications_used", _jsonb(), nullable=False),
        sa.Column("follow_up_required", sa.Boolean(), nullable=False),
        sa.Column("follow_up_date", sa.Date(), nullable=True),
        *_visit_constraints(),
    )

    op.create_table(
        "laboratory_records",
        *_visit_columns(),
        sa.Column("sample_code", sa.String(length=64), nullable=False),
        sa.Column("farm_location", sa.String(length=255), nullable=False),
        sa.Column("collector", sa.String(length=255), nullable=False),
        sa.Column("sample_type", sa.String(length=64), nullable=False),
        sa.Column("sample_number", sa.String(length=64), nullable=False),
        sa.Column("positive_cases", sa.Integer(), nullable=False),
        sa.Column("negative_cases", sa.Integer(), nullable=False),
        sa.Column("species_counts", _jsonb(), nullable=False),
        sa.Column("test_results", _jsonb(), nullable=False),
        sa.Column("client_name", sa.String(length=255), nullable=False),
        sa.Column("client_national_id", sa.String(length=32), nullable=False),
        sa.Column("client_phone", sa.String(length=32), nullable=False),
        sa.Column("client_birth_date", sa.Date(), nullable=True),
        *_visit_constraints(),
    )

    for table, indexes in _DOMAIN_INDEXES.items():
        _create_visit_indexes(table, tracks_request=table != "laboratory_records")
        for name, column in indexes:
            op.create_index(name, table, [column], unique=False)


def downgrade() -> None:
    for table, indexes in reversed(list(_DOMAIN_INDEXES.items())):
        for name, _column in reversed(indexes):
            op.drop_index(name, table_name=table)
        _drop_visit_indexes(table, tracks_request=table != "laboratory_records")
        op.drop_table(table)
