"""esquema inicial: usuarios, pacientes, servicios, citas

Revision ID: 5b1e2c7a9d40
Revises:
Create Date: 2026-10-19 10:12:41.201733

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '5b1e2c7a9d40'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ROLES = ("admin", "medico", "recepcion")
ESTADOS = ("programada", "confirmada", "en_proceso", "completada", "cancelada", "no_asistio")


def upgrade() -> None:
    op.create_table(
        "usuarios",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("nombre", sa.String(length=100), nullable=False),
        sa.Column("correo", sa.String(length=255), nullable=False),
        sa.Column("password", sa.String(length=255), nullable=False),
        sa.Column("rol", sa.Enum(*ROLES, name="rolenum"), nullable=False),
        sa.UniqueConstraint("nombre"),
    )
    op.create_index("ix_usuarios_correo", "usuarios", ["correo"], unique=True)

    op.create_table(
        "pacientes",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("nombre", sa.String(length=150), nullable=False),
        sa.Column("telefono", sa.String(length=30), nullable=False),
        sa.Column("correo", sa.String(length=255), nullable=False),
        sa.Column("fecha_registro", sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_pacientes_correo", "pacientes", ["correo"], unique=True)

    op.create_table(
        "servicios",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("nombre", sa.String(length=150), nullable=False),
        sa.Column("precio", sa.Numeric(10, 2), nullable=False),
        sa.UniqueConstraint("nombre"),
        sa.CheckConstraint("precio >= 0", name="ck_servicios_precio"),
    )

    # RESTRICT: no se borra un padre con citas que lo referencian
    op.create_table(
        "citas",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("paciente_id", sa.Integer(), sa.ForeignKey("pacientes.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("servicio_id", sa.Integer(), sa.ForeignKey("servicios.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("medico_usuario_id", sa.Integer(), sa.ForeignKey("usuarios.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("fecha_hora", sa.DateTime(), nullable=False),
        sa.Column("estado", sa.Enum(*ESTADOS, name="estadocita"), server_default="programada", nullable=False),
        sa.Column("notas", sa.Text(), nullable=True),
    )
    op.create_index("ix_citas_paciente_id", "citas", ["paciente_id"])
    op.create_index("ix_citas_servicio_id", "citas", ["servicio_id"])
    op.create_index("ix_citas_medico_usuario_id", "citas", ["medico_usuario_id"])
    op.create_index("ix_citas_fecha_hora", "citas", ["fecha_hora"])


def downgrade() -> None:
    # en orden inverso por las FKs
    op.drop_index("ix_citas_fecha_hora", table_name="citas")
    op.drop_index("ix_citas_medico_usuario_id", table_name="citas")
    op.drop_index("ix_citas_servicio_id", table_name="citas")
    op.drop_index("ix_citas_paciente_id", table_name="citas")
    op.drop_table("citas")
    op.drop_table("servicios")
    op.drop_index("ix_pacientes_correo", table_name="pacientes")
    op.drop_table("pacientes")
    op.drop_index("ix_usuarios_correo", table_name="usuarios")
    op.drop_table("usuarios")
