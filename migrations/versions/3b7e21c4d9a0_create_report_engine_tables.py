"""Create test assignment and report engine tables

Revision ID: 3b7e21c4d9a0
Revises:
Create Date: 2026-10-19 10:00:00

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3b7e21c4d9a0'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    """Create the five tables backing report types, fields, instances and EAV values."""
    op.create_table(
        'test_assignments',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('patient_id', sa.String(length=36), nullable=False),
        sa.Column('test_type', sa.String(length=20), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='pending'),
        sa.Column('assigned_by', sa.String(length=64), nullable=True),
        sa.Column('assigned_at', sa.DateTime(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_test_assignments_patient_id', 'test_assignments', ['patient_id'])
    op.create_index('ix_test_assignments_status', 'test_assignments', ['status'])

    op.create_table(
        'report_types',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('code', sa.String(length=50), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_report_types_code', 'report_types', ['code'], unique=True)
    op.create_index('ix_report_types_is_active', 'report_types', ['is_active'])

    op.create_table(
        'report_fields',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('report_type_id', sa.String(length=36),
                  sa.ForeignKey('report_types.id', ondelete='CASCADE'), nullable=False),
        sa.Column('field_name', sa.String(length=100), nullable=False),
        sa.Column('field_label', sa.String(length=255), nullable=False),
        sa.Column('field_type', sa.String(length=50), nullable=False),
        sa.Column('field_order', sa.Integer(), nullable=False),
        sa.Column('is_required', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('unit', sa.String(length=50), nullable=True),
        sa.Column('normal_range_min', sa.Float(), nullable=True),
        sa.Column('normal_range_max', sa.Float(), nullable=True),
        sa.Column('normal_range_text', sa.String(length=255), nullable=True),
        sa.Column('dropdown_options', sa.Text(), nullable=True),
        sa.Column('default_value', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint('report_type_id', 'field_name', name='unique_report_type_field'),
    )
    op.create_index('ix_report_fields_report_type_id', 'report_fields', ['report_type_id'])
    op.create_index('idx_report_fields_field_order', 'report_fields', ['report_type_id', 'field_order'])

    op.create_table(
        'report_instances',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('test_assignment_id', sa.String(length=36),
                  sa.ForeignKey('test_assignments.id', ondelete='CASCADE'), nullable=False),
        sa.Column('report_type_id', sa.String(length=36), sa.ForeignKey('report_types.id'), nullable=False),
        sa.Column('status', sa.String(length=50), nullable=False, server_default='pending'),
        sa.Column('created_by', sa.String(length=64), nullable=True),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint('test_assignment_id', name='unique_test_assignment'),
        sa.CheckConstraint("status IN ('pending', 'in-progress', 'completed')", name='ck_report_instances_status'),
    )
    op.create_index('ix_report_instances_test_assignment_id', 'report_instances', ['test_assignment_id'])
    op.create_index('ix_report_instances_status', 'report_instances', ['status'])

    op.create_table(
        'report_values',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('report_instance_id', sa.String(length=36),
                  sa.ForeignKey('report_instances.id', ondelete='CASCADE'), nullable=False),
        sa.Column('report_field_id', sa.String(length=36), sa.ForeignKey('report_fields.id'), nullable=False),
        sa.Column('value_text', sa.Text(), nullable=True),
        sa.Column('value_number', sa.Float(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint('report_instance_id', 'report_field_id', name='unique_instance_field'),
    )
    op.create_index('ix_report_values_report_instance_id', 'report_values', ['report_instance_id'])


def downgrade():
    """Drop report engine tables."""
    op.drop_index('ix_report_values_report_instance_id', table_name='report_values')
    op.drop_table('report_values')

    op.drop_index('ix_report_instances_status', table_name='report_instances')
    op.drop_index('ix_report_instances_test_assignment_id', table_name='report_instances')
    op.drop_table('report_instances')

    op.drop_index('idx_report_fields_field_order', table_name='report_fields')
    op.drop_index('ix_report_fields_report_type_id', table_name='report_fields')
    op.drop_table('report_fields')

    op.drop_index('ix_report_types_is_active', table_name='report_types')
    op.drop_index('ix_report_types_code', table_name='report_types')
    op.drop_table('report_types')

    op.drop_index('ix_test_assignments_status', table_name='test_assignments')
    op.drop_index('ix_test_assignments_patient_id', table_name='test_assignments')
    op.drop_table('test_assignments')
