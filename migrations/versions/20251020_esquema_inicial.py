"""esquema inicial: usuarios, perfiles, talleres, inscripciones, avisos, calendario, emergencia

Revision ID: 20251020_esquema_inicial
Revises:
Create Date: 2025-10-20 10:00:00
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "20251020_esquema_inicial"
down_revision: Union[str, Sequence[str], None] = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        "usuarios",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("email", sa.String(160), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("tipo_usuario", sa.String(20), nullable=False),
        sa.Column("activo", sa.Boolean(), nullable=False),
        sa.Column("fecha_registro", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_usuarios"),
    )
    op.create_index("ix_usuarios_email", "usuarios", ["email"], unique=True)

    op.create_table(
        "perfiles_alumno",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("usuario_id", sa.Integer(), nullable=False),
        sa.Column("nombre", sa.String(100), nullable=False),
        sa.Column("apellido_paterno", sa.String(100), nullable=False),
        sa.Column("apellido_materno", sa.String(100), nullable=True),
        sa.Column("numero_control", sa.String(30), nullable=False),
        sa.Column("grupo", sa.String(20), nullable=True),
        sa.Column("semestre", sa.Integer(), nullable=True),
        sa.Column("telefono", sa.String(30), nullable=True),
        sa.Column("fecha_nacimiento", sa.Date(), nullable=True),
        sa.Column("contacto_emergencia", sa.String(150), nullable=True),
        sa.Column("telefono_emergencia", sa.String(30), nullable=True),
        sa.Column("direccion", sa.String(255), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["usuario_id"], ["usuarios.id"], name="fk_perfiles_alumno_usuario_id_usuarios", ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id", name="pk_perfiles_alumno"),
        sa.UniqueConstraint("usuario_id", name="uq_perfiles_alumno_usuario_id"),
        sa.UniqueConstraint("numero_control", name="uq_perfiles_alumno_numero_control"),
    )

    op.create_table(
        "perfiles_instructor",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("usuario_id", sa.Integer(), nullable=False),
        sa.Column("nombre", sa.String(100), nullable=False),
        sa.Column("apellido_paterno", sa.String(100), nullable=False),
        sa.Column("apellido_materno", sa.String(100), nullable=True),
        sa.Column("especialidad", sa.String(150), nullable=True),
        sa.Column("telefono", sa.String(30), nullable=True),
        sa.Column("descripcion", sa.Text(), nullable=True),
        sa.Column("contacto_emergencia", sa.String(150), nullable=True),
        sa.Column("telefono_emergencia", sa.String(30), nullable=True),
        sa.Column("direccion", sa.String(255), nullable=True),
        sa.ForeignKeyConstraint(["usuario_id"], ["usuarios.id"], name="fk_perfiles_instructor_usuario_id_usuarios", ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id", name="pk_perfiles_instructor"),
        sa.UniqueConstraint("usuario_id", name="uq_perfiles_instructor_usuario_id"),
    )

    op.create_table(
        "talleres",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("nombre", sa.String(150), nullable=False),
        sa.Column("descripcion", sa.Text(), nullable=True),
        sa.Column("categoria", sa.String(80), nullable=False),
        sa.Column("cupo_maximo", sa.Integer(), nullable=False),
        sa.Column("horario", sa.String(200), nullable=True),
        sa.Column("ubicacion", sa.String(150), nullable=True),
        sa.Column("activo", sa.Boolean(), nullable=False),
        sa.Column("instructor_id", sa.Integer(), nullable=True),
        sa.Column("fecha_inicio", sa.Date(), nullable=True),
        sa.Column("fecha_fin", sa.Date(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("cupo_maximo > 0", name="ck_talleres_cupo_positivo"),
        sa.ForeignKeyConstraint(["instructor_id"], ["perfiles_instructor.id"], name="fk_talleres_instructor_id_perfiles_instructor", ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id", name="pk_talleres"),
    )
    op.create_index("ix_talleres_categoria", "talleres", ["categoria"])
    op.create_index("ix_talleres_instructor_id", "talleres", ["instructor_id"])

    op.create_table(
        "inscripciones",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("alumno_id", sa.Integer(), nullable=False),
        sa.Column("taller_id", sa.Integer(), nullable=False),
        sa.Column("estado", sa.String(20), nullable=False),
        sa.Column("comentarios", sa.Text(), nullable=True),
        sa.Column("fecha_inscripcion", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["alumno_id"], ["perfiles_alumno.id"], name="fk_inscripciones_alumno_id_perfiles_alumno", ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["taller_id"], ["talleres.id"], name="fk_inscripciones_taller_id_talleres", ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id", name="pk_inscripciones"),
    )
    # una sola inscripción activa por (alumno, taller)
    op.create_index(
        "uq_inscripcion_activa",
        "inscripciones",
        ["alumno_id", "taller_id"],
        unique=True,
        sqlite_where=sa.text("estado = 'activa'"),
        postgresql_where=sa.text("estado = 'activa'"),
    )
    op.create_index("ix_inscripciones_taller_estado", "inscripciones", ["taller_id", "estado"])

    op.create_table(
        "avisos",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("taller_id", sa.Integer(), nullable=False),
        sa.Column("instructor_id", sa.Integer(), nullable=False),
        sa.Column("titulo", sa.String(200), nullable=False),
        sa.Column("contenido", sa.Text(), nullable=False),
        sa.Column("importante", sa.Boolean(), nullable=False),
        sa.Column("activo", sa.Boolean(), nullable=False),
        sa.Column("fecha_expiracion", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["taller_id"], ["talleres.id"], name="fk_avisos_taller_id_talleres", ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["instructor_id"], ["perfiles_instructor.id"], name="fk_avisos_instructor_id_perfiles_instructor", ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id", name="pk_avisos"),
    )
    op.create_index("ix_avisos_taller_id", "avisos", ["taller_id"])
    op.create_index("ix_avisos_instructor_id", "avisos", ["instructor_id"])

    op.create_table(
        "calendario_fechas",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("taller_id", sa.Integer(), nullable=False),
        sa.Column("instructor_id", sa.Integer(), nullable=False),
        sa.Column("titulo", sa.String(200), nullable=False),
        sa.Column("descripcion", sa.Text(), nullable=True),
        sa.Column("fecha_evento", sa.DateTime(timezone=True), nullable=False),
        sa.Column("tipo_evento", sa.String(20), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["taller_id"], ["talleres.id"], name="fk_calendario_fechas_taller_id_talleres", ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["instructor_id"], ["perfiles_instructor.id"], name="fk_calendario_fechas_instructor_id_perfiles_instructor", ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id", name="pk_calendario_fechas"),
    )
    op.create_index("ix_calendario_fechas_taller_id", "calendario_fechas", ["taller_id"])
    op.create_index("ix_calendario_fechas_instructor_id", "calendario_fechas", ["instructor_id"])
    op.create_index("ix_calendario_fechas_fecha_evento", "calendario_fechas", ["fecha_evento"])

    op.create_table(
        "informacion_emergencia",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("alumno_id", sa.Integer(), nullable=False),
        sa.Column("contacto_emergencia_nombre", sa.String(150), nullable=False),
        sa.Column("contacto_emergencia_telefono", sa.String(30), nullable=False),
        sa.Column("contacto_emergencia_relacion", sa.String(60), nullable=False),
        sa.Column("tipo_sangre", sa.String(5), nullable=True),
        sa.Column("alergias", sa.Text(), nullable=True),
        sa.Column("medicamentos", sa.Text(), nullable=True),
        sa.Column("condiciones_medicas", sa.Text(), nullable=True),
        sa.Column("seguro_medico", sa.String(120), nullable=True),
        sa.Column("numero_seguro", sa.String(60), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["alumno_id"], ["perfiles_alumno.id"], name="fk_informacion_emergencia_alumno_id_perfiles_alumno", ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id", name="pk_informacion_emergencia"),
        sa.UniqueConstraint("alumno_id", name="uq_informacion_emergencia_alumno_id"),
    )


def downgrade() -> None:
    op.drop_table("informacion_emergencia")
    op.drop_index("ix_calendario_fechas_fecha_evento", table_name="calendario_fechas")
    op.drop_index("ix_calendario_fechas_instructor_id", table_name="calendario_fechas")
    op.drop_index("ix_calendario_fechas_taller_id", table_name="calendario_fechas")
    op.drop_table("calendario_fechas")
    op.drop_index("ix_avisos_instructor_id", table_name="avisos")
    op.drop_index("ix_avisos_taller_id", table_name="avisos")
    op.drop_table("avisos")
    op.drop_index("ix_inscripciones_taller_estado", table_name="inscripciones")
    op.drop_index("uq_inscripcion_activa", table_name="inscripciones")
    op.drop_table("inscripciones")
    op.drop_index("ix_talleres_instructor_id", table_name="talleres")
    op.drop_index("ix_talleres_categoria", table_name="talleres")
    op.drop_table("talleres")
    op.drop_table("perfiles_instructor")
    op.drop_table("perfiles_alumno")
    op.drop_index("ix_usuarios_email", table_name="usuarios")
    op.drop_table("usuarios")
