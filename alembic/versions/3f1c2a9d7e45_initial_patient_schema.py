"""initial_patient_schema

Revision ID: 3f1c2a9d7e45
Revises:
Create Date: 2025-06-02 10:14:08.512904

"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "3f1c2a9d7e45"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade():
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("id_card", sa.String(length=13), nullable=False),
        sa.Column("password", sa.String(length=255), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_users")),
    )
    op.create_index(op.f("ix_users_id_card"), "users", ["id_card"], unique=True)

    op.create_table(
        "patient",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("title_name", sa.String(length=50), nullable=False),
        sa.Column("first_name", sa.String(length=100), nullable=False),
        sa.Column("last_name", sa.String(length=100), nullable=False),
        sa.Column("id_card", sa.String(length=13), nullable=False),
        sa.Column("phone", sa.String(length=10), nullable=False),
        sa.Column("gender", sa.String(length=20), nullable=False),
        sa.Column("date_birth", sa.Date(), nullable=False),
        sa.Column("house_number", sa.String(length=50), nullable=True),
        sa.Column("street", sa.String(length=100), nullable=True),
        sa.Column("village", sa.String(length=100), nullable=True),
        sa.Column("subdistrict", sa.String(length=100), nullable=True),
        sa.Column("district", sa.String(length=100), nullable=True),
        sa.Column("province", sa.String(length=100), nullable=True),
        sa.Column("weight", sa.Float(), nullable=False),
        sa.Column("height", sa.Float(), nullable=False),
        sa.Column("waist", sa.Float(), nullable=False),
        sa.Column("password", sa.String(length=255), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_patient")),
    )
    op.create_index(op.f("ix_patient_id_card"), "patient", ["id_card"], unique=False)

    op.create_table(
        "health_data",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("patient_id", sa.Integer(), nullable=False),
        sa.Column("bmi", sa.Float(), nullable=False),
        sa.Column("waist_to_height_ratio", sa.Float(), nullable=False),
        sa.Column("record_date", sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["patient_id"],
            ["patient.id"],
            name=op.f("fk_health_data_patient_id_patient"),
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_health_data")),
        sa.UniqueConstraint("patient_id", name=op.f("uq_health_data_patient_id")),
    )

    op.create_table(
        "appointments",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("program_name", sa.String(length=200), nullable=False),
        sa.Column("result_program", sa.JSON(none_as_null=True), nullable=True),
        sa.Column("appointment_date", sa.Date(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["user_id"],
            ["users.id"],
            name=op.f("fk_appointments_user_id_users"),
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_appointments")),
    )
    op.create_index(
        op.f("ix_appointments_user_id"), "appointments", ["user_id"], unique=False
    )
    op.create_index(
        op.f("ix_appointments_appointment_date"),
        "appointments",
        ["appointment_date"],
        unique=False,
    )

    op.create_table(
        "password_changes",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("patient_id", sa.Integer(), nullable=False),
        sa.Column("changed_at", sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["user_id"],
            ["users.id"],
            name=op.f("fk_password_changes_user_id_users"),
        ),
        sa.ForeignKeyConstraint(
            ["patient_id"],
            ["patient.id"],
            name=op.f("fk_password_changes_patient_id_patient"),
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_password_changes")),
    )


def downgrade():
    op.drop_table("password_changes")
    op.drop_index(op.f("ix_appointments_appointment_date"), table_name="appointments")
    op.drop_index(op.f("ix_appointments_user_id"), table_name="appointments")
    op.drop_table("appointments")
    op.drop_table("health_data")
    op.drop_index(op.f("ix_patient_id_card"), table_name="patient")
    op.drop_table("patient")
    op.drop_index(op.f("ix_users_id_card"), table_name="users")
    op.drop_table("users")
