"""create usuarios, enderecos and preferencias_comunicacao

Revision ID: 5d1e2a7c9b30
Revises:
Create Date: 2026-10-17 10:12:41.318207

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '5d1e2a7c9b30'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    op.create_table(
        'usuarios',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('nome_completo', sa.String(length=100), nullable=False),
        sa.Column('cpf', sa.String(length=14), nullable=False),
        sa.Column('data_nascimento', sa.Date(), nullable=False),
        sa.Column('email', sa.String(length=100), nullable=False),
        sa.Column('senha', sa.String(length=255), nullable=False),
        sa.Column('ativo', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.UniqueConstraint('email', name='uq_usuarios_email'),
        sa.UniqueConstraint('cpf', name='uq_usuarios_cpf'),
    )
    op.create_index(op.f('ix_usuarios_email'), 'usuarios', ['email'])

    op.create_table(
        'enderecos',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            'usuario_id',
            sa.Integer(),
            sa.ForeignKey('usuarios.id', onupdate='CASCADE', ondelete='CASCADE'),
            nullable=False,
            unique=True,
        ),
        sa.Column('cep', sa.String(length=9), nullable=False),
        sa.Column('logradouro', sa.String(length=100), nullable=True),
        sa.Column('numero', sa.String(length=10), nullable=True),
        sa.Column('complemento', sa.String(length=50), nullable=True),
        sa.Column('bairro', sa.String(length=50), nullable=True),
        sa.Column('cidade', sa.String(length=50), nullable=True),
        sa.Column('estado', sa.String(length=2), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'preferencias_comunicacao',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            'usuario_id',
            sa.Integer(),
            sa.ForeignKey('usuarios.id', onupdate='CASCADE', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('alerta_caminhao', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('politicas_ambientais', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('dicas_descarte', sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
    )
    # Unique index guarantees the 1:1 relationship with usuarios
    op.create_index(
        'preferencias_usuario_unique',
        'preferencias_comunicacao',
        ['usuario_id'],
        unique=True,
    )


def downgrade() -> None:
    op.drop_index('preferencias_usuario_unique', table_name='preferencias_comunicacao')
    op.drop_table('preferencias_comunicacao')
    op.drop_table('enderecos')
    op.drop_index(op.f('ix_usuarios_email'), table_name='usuarios')
    op.drop_table('usuarios')
