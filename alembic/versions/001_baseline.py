"""001_baseline

Baseline migration: vehicles, routes, segments and route options.

Revision ID: 0001
Revises: (none)
Create Date: 2026-10-17
"""
from typing import Sequence, Union

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_TABLES_WITH_TRIGGERS = ["vehicles", "routes", "segments", "route_options"]


def upgrade() -> None:
    # ------------------------------------------------------------------
    # Extensions
    # ------------------------------------------------------------------
    op.execute('CREATE EXTENSION IF NOT EXISTS "uuid-ossp"')

    # ------------------------------------------------------------------
    # Enum types
    # ------------------------------------------------------------------
    op.execute(
        "CREATE TYPE segment_status AS ENUM "
        "('CREATED', 'ASSIGNED', 'STARTED', 'FINISHED')"
    )

    # ------------------------------------------------------------------
    # Tables (dependency order)
    # ------------------------------------------------------------------

    # --- vehicles ---
    op.execute("""
        CREATE TABLE vehicles (
            id UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            license_plate VARCHAR(20) NOT NULL,
            brand VARCHAR(100),
            model VARCHAR(100),
            carrier_name VARCHAR(200),
            max_weight NUMERIC(10, 2) NOT NULL,
            max_volume NUMERIC(10, 2) NOT NULL,
            base_cost NUMERIC(12, 2),
            cost_per_km NUMERIC(10, 2) NOT NULL DEFAULT 0,
            avg_fuel_consumption DOUBLE PRECISION NOT NULL DEFAULT 0,
            available BOOLEAN NOT NULL DEFAULT TRUE,
            active BOOLEAN NOT NULL DEFAULT TRUE,
            created_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT CURRENT_TIMESTAMP,
            CONSTRAINT uq_vehicles_license_plate UNIQUE (license_plate)
        )
    """)

    # --- routes ---
    op.execute("""
        CREATE TABLE routes (
            id UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            request_id INTEGER NOT NULL,
            selected_option_id UUID,
            created_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT CURRENT_TIMESTAMP,
            CONSTRAINT uq_routes_request_id UNIQUE (request_id)
        )
    """)

    # --- segments ---
    op.execute("""
        CREATE TABLE segments (
            id UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            route_id UUID NOT NULL REFERENCES routes(id) ON DELETE CASCADE,
            sequence_number INTEGER NOT NULL,
            origin_warehouse_id INTEGER,
            origin_name VARCHAR(200),
            origin_latitude DOUBLE PRECISION,
            origin_longitude DOUBLE PRECISION,
            destination_warehouse_id INTEGER,
            destination_name VARCHAR(200),
            destination_latitude DOUBLE PRECISION,
            destination_longitude DOUBLE PRECISION,
            distance_km DOUBLE PRECISION NOT NULL DEFAULT 0,
            duration_hours DOUBLE PRECISION NOT NULL DEFAULT 0,
            status segment_status NOT NULL DEFAULT 'CREATED',
            vehicle_id UUID REFERENCES vehicles(id) ON DELETE SET NULL,
            auto_generated BOOLEAN NOT NULL DEFAULT FALSE,
            scheduled_start TIMESTAMP WITHOUT TIME ZONE,
            scheduled_end TIMESTAMP WITHOUT TIME ZONE,
            actual_start TIMESTAMP WITHOUT TIME ZONE,
            actual_end TIMESTAMP WITHOUT TIME ZONE,
            approximate_cost NUMERIC(12, 2),
            actual_cost NUMERIC(12, 2),
            created_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT CURRENT_TIMESTAMP,
            CONSTRAINT uq_segments_route_sequence UNIQUE (route_id, sequence_number),
            CONSTRAINT ck_segments_real_order
                CHECK (actual_end IS NULL OR actual_start IS NULL OR actual_end >= actual_start)
        )
    """)

    # --- route_options ---
    op.execute("""
        CREATE TABLE route_options (
            id UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            request_id INTEGER NOT NULL,
            route_id UUID,
            option_index INTEGER NOT NULL,
            total_distance_km DOUBLE PRECISION NOT NULL,
            total_duration_hours DOUBLE PRECISION NOT NULL,
            warehouse_ids JSON NOT NULL DEFAULT '[]',
            warehouse_names JSON NOT NULL DEFAULT '[]',
            legs JSON NOT NULL DEFAULT '[]',
            geometry TEXT,
            created_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT CURRENT_TIMESTAMP,
            CONSTRAINT uq_route_options_request_index UNIQUE (request_id, option_index)
        )
    """)

    # ------------------------------------------------------------------
    # Indexes
    # ------------------------------------------------------------------
    op.create_index("ix_vehicles_license_plate", "vehicles", ["license_plate"])
    op.create_index("ix_routes_request_id", "routes", ["request_id"])
    op.create_index("ix_segments_route_id", "segments", ["route_id"])
    op.create_index("ix_segments_vehicle_id", "segments", ["vehicle_id"])
    op.create_index("ix_route_options_request_id", "route_options", ["request_id"])
    op.create_index("ix_route_options_route_id", "route_options", ["route_id"])

    # ------------------------------------------------------------------
    # Functions & triggers
    # ------------------------------------------------------------------

    # Trigger function: auto-update updated_at
    op.execute("""
        CREATE OR REPLACE FUNCTION update_updated_at_column()
        RETURNS TRIGGER AS $$
        BEGIN
            NEW.updated_at = CURRENT_TIMESTAMP;
            RETURN NEW;
        END;
        $$ LANGUAGE plpgsql
    """)

    for table in _TABLES_WITH_TRIGGERS:
        op.execute(
            f"CREATE TRIGGER update_{table}_updated_at "
            f"BEFORE UPDATE ON {table} "
            f"FOR EACH ROW EXECUTE FUNCTION update_updated_at_column()"
        )


def downgrade() -> None:
    for table in _TABLES_WITH_TRIGGERS:
        op.execute(f"DROP TRIGGER IF EXISTS update_{table}_updated_at ON {table}")

    op.execute("DROP FUNCTION IF EXISTS update_updated_at_column()")

    # ------------------------------------------------------------------
    # Drop tables (reverse dependency order)
    # ------------------------------------------------------------------
    op.execute("DROP TABLE IF EXISTS route_options CASCADE")
    op.execute("DROP TABLE IF EXISTS segments CASCADE")
    op.execute("DROP TABLE IF EXISTS routes CASCADE")
    op.execute("DROP TABLE IF EXISTS vehicles CASCADE")

    op.execute("DROP TYPE IF EXISTS segment_status")
