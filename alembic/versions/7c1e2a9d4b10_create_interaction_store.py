"""create_interaction_store

Revision ID: 7c1e2a9d4b10
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '7c1e2a9d4b10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def _metric_columns():
    return [
        sa.Column('iptm', sa.Float(), nullable=False),
        sa.Column('contacts_pae_lt_3', sa.Integer(), nullable=True),
        sa.Column('contacts_pae_lt_6', sa.Integer(), nullable=True),
        sa.Column('interface_plddt', sa.Float(), nullable=True),
        sa.Column('ipsae', sa.Float(), nullable=True),
        sa.Column('ipsae_confidence', sa.String(length=20), nullable=True),
        sa.Column('ipsae_pae_cutoff', sa.Float(), nullable=True),
        sa.Column('confidence', sa.String(length=50), nullable=True),
        sa.Column('reported_band', sa.String(length=50), nullable=True),
        sa.Column('alphafold_version', sa.String(length=10), nullable=False),
        sa.Column('analysis_version', sa.String(length=10), nullable=False),
        sa.Column('source_path', sa.Text(), nullable=False),
    ]


def upgrade() -> None:
    # 1. Protein identities and their aliases
    op.create_table(
        'proteins',
        sa.Column('protein_id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('accession', sa.String(length=255), nullable=False),
        sa.Column('display_name', sa.String(length=255), nullable=True),
        sa.Column('organism', sa.String(length=200), nullable=True),
        sa.Column('organism_code', sa.String(length=10), nullable=True),
        sa.Column('is_synthetic', sa.Boolean(), nullable=False, server_default='0'),
        *_timestamps(),
        sa.PrimaryKeyConstraint('protein_id', name=op.f('pk_proteins')),
    )
    op.create_index(op.f('ix_proteins_accession'), 'proteins', ['accession'], unique=True)
    op.create_index(op.f('ix_proteins_display_name'), 'proteins', ['display_name'], unique=False)

    op.create_table(
        'protein_aliases',
        sa.Column('alias_id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('protein_id', sa.Integer(), nullable=False),
        sa.Column('alias_name', sa.String(length=255), nullable=False),
        sa.Column('alias_type', sa.String(length=50), nullable=True),
        sa.Column('source', sa.String(length=50), nullable=False),
        sa.ForeignKeyConstraint(
            ['protein_id'], ['proteins.protein_id'],
            name=op.f('fk_protein_aliases_protein_id_proteins'), ondelete='CASCADE',
        ),
        sa.PrimaryKeyConstraint('alias_id', name=op.f('pk_protein_aliases')),
        sa.UniqueConstraint('protein_id', 'alias_name', name=op.f('uq_protein_aliases_protein_id')),
    )
    op.create_index(op.f('ix_protein_aliases_protein_id'), 'protein_aliases', ['protein_id'], unique=False)
    op.create_index(op.f('ix_protein_aliases_alias_name'), 'protein_aliases', ['alias_name'], unique=False)

    # 2. Pairwise interactions
    op.create_table(
        'interactions',
        sa.Column('interaction_id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('bait_protein_id', sa.Integer(), nullable=False),
        sa.Column('prey_protein_id', sa.Integer(), nullable=False),
        *_metric_columns(),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ['bait_protein_id'], ['proteins.protein_id'],
            name=op.f('fk_interactions_bait_protein_id_proteins'), ondelete='CASCADE',
        ),
        sa.ForeignKeyConstraint(
            ['prey_protein_id'], ['proteins.protein_id'],
            name=op.f('fk_interactions_prey_protein_id_proteins'), ondelete='CASCADE',
        ),
        sa.PrimaryKeyConstraint('interaction_id', name=op.f('pk_interactions')),
        sa.UniqueConstraint(
            'bait_protein_id', 'prey_protein_id', 'source_path',
            name='uq_interactions_store_key',
        ),
    )
    op.create_index(op.f('ix_interactions_bait_protein_id'), 'interactions', ['bait_protein_id'], unique=False)
    op.create_index(op.f('ix_interactions_prey_protein_id'), 'interactions', ['prey_protein_id'], unique=False)
    op.create_index(op.f('ix_interactions_confidence'), 'interactions', ['confidence'], unique=False)
    op.create_index(op.f('ix_interactions_ipsae_confidence'), 'interactions', ['ipsae_confidence'], unique=False)
    op.create_index(op.f('ix_interactions_analysis_version'), 'interactions', ['analysis_version'], unique=False)

    # 3. Complexes, their members and complex-prey interactions
    op.create_table(
        'protein_complexes',
        sa.Column('complex_id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('complex_key', sa.String(length=255), nullable=False),
        sa.Column('variant', sa.String(length=100), nullable=False),
        sa.Column('display_name', sa.String(length=255), nullable=True),
        sa.Column('num_proteins', sa.Integer(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('complex_id', name=op.f('pk_protein_complexes')),
    )
    op.create_index(op.f('ix_protein_complexes_complex_key'), 'protein_complexes', ['complex_key'], unique=True)

    op.create_table(
        'complex_proteins',
        sa.Column('member_id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('complex_id', sa.Integer(), nullable=False),
        sa.Column('protein_id', sa.Integer(), nullable=False),
        sa.Column('chain_id', sa.String(length=10), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False),
        sa.ForeignKeyConstraint(
            ['complex_id'], ['protein_complexes.complex_id'],
            name=op.f('fk_complex_proteins_complex_id_protein_complexes'), ondelete='CASCADE',
        ),
        sa.ForeignKeyConstraint(
            ['protein_id'], ['proteins.protein_id'],
            name=op.f('fk_complex_proteins_protein_id_proteins'), ondelete='CASCADE',
        ),
        sa.PrimaryKeyConstraint('member_id', name=op.f('pk_complex_proteins')),
        sa.UniqueConstraint('complex_id', 'protein_id', 'chain_id', name=op.f('uq_complex_proteins_complex_id')),
    )
    op.create_index(op.f('ix_complex_proteins_complex_id'), 'complex_proteins', ['complex_id'], unique=False)
    op.create_index(op.f('ix_complex_proteins_protein_id'), 'complex_proteins', ['protein_id'], unique=False)

    op.create_table(
        'complex_interactions',
        sa.Column('complex_interaction_id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('bait_complex_id', sa.Integer(), nullable=False),
        sa.Column('prey_protein_id', sa.Integer(), nullable=False),
        *_metric_columns(),
        sa.Column(
            'per_chain_plddt',
            sa.JSON().with_variant(postgresql.JSONB(), 'postgresql'),
            nullable=False,
        ),
        sa.Column('ranking_score', sa.Float(), nullable=True),
        sa.Column('ptm', sa.Float(), nullable=True),
        sa.Column('mean_plddt', sa.Float(), nullable=True),
        sa.Column('interface_residue_count', sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ['bait_complex_id'], ['protein_complexes.complex_id'],
            name=op.f('fk_complex_interactions_bait_complex_id_protein_complexes'), ondelete='CASCADE',
        ),
        sa.ForeignKeyConstraint(
            ['prey_protein_id'], ['proteins.protein_id'],
            name=op.f('fk_complex_interactions_prey_protein_id_proteins'), ondelete='CASCADE',
        ),
        sa.PrimaryKeyConstraint('complex_interaction_id', name=op.f('pk_complex_interactions')),
        sa.UniqueConstraint(
            'bait_complex_id', 'prey_protein_id', 'source_path', 'alphafold_version',
            name='uq_complex_interactions_store_key',
        ),
    )
    op.create_index(op.f('ix_complex_interactions_bait_complex_id'), 'complex_interactions', ['bait_complex_id'], unique=False)
    op.create_index(op.f('ix_complex_interactions_prey_protein_id'), 'complex_interactions', ['prey_protein_id'], unique=False)
    op.create_index(op.f('ix_complex_interactions_confidence'), 'complex_interactions', ['confidence'], unique=False)


def downgrade() -> None:
    op.drop_table('complex_interactions')
    op.drop_table('complex_proteins')
    op.drop_index(op.f('ix_protein_complexes_complex_key'), table_name='protein_complexes')
    op.drop_table('protein_complexes')
    op.drop_table('interactions')
    op.drop_table('protein_aliases')
    op.drop_index(op.f('ix_proteins_display_name'), table_name='proteins')
    op.drop_index(op.f('ix_proteins_accession'), table_name='proteins')
    op.drop_table('proteins')
