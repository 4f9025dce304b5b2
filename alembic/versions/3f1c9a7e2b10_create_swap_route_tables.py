"""create_swap_route_tables

Revision ID: 3f1c9a7e2b10
Revises:
Create Date: 2026-10-17 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c9a7e2b10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


user_role = sa.Enum('admin', 'fleet_manager', 'battery_swapper', name='userrole')
route_status = sa.Enum('suggested', 'confirmed', 'in_progress', 'completed', name='routestatus')
route_stop_status = sa.Enum('pending', 'completed', 'skipped', name='routestopstatus')
generation_status = sa.Enum('QUEUED', 'PROCESSING', 'COMPLETED', 'FAILED', name='generationstatus')


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    """Create users, zones, vehicles, routes and route generation requests."""
    op.create_table(
        'user',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('hashed_password', sa.String(), nullable=False),
        sa.Column('first_name', sa.String(), nullable=False),
        sa.Column('last_name', sa.String(), nullable=False),
        sa.Column('role', user_role, nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_user_id', 'user', ['id'])
    op.create_index('ix_user_email', 'user', ['email'], unique=True)

    op.create_table(
        'zone',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('country_code', sa.String(3), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_zone_id', 'zone', ['id'])

    op.create_table(
        'parking_zone',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('zone_id', sa.Integer(), sa.ForeignKey('zone.id'), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('latitude', sa.Float(), nullable=False),
        sa.Column('longitude', sa.Float(), nullable=False),
        sa.Column('radius_meters', sa.Float(), nullable=False),
        sa.Column('max_capacity', sa.Integer(), nullable=False),
        sa.Column('current_vehicle_count', sa.Integer(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_parking_zone_id', 'parking_zone', ['id'])
    op.create_index('ix_parking_zone_zone_id', 'parking_zone', ['zone_id'])

    op.create_table(
        'vehicle',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('external_id', sa.String(50), nullable=False),
        sa.Column('registration_number', sa.String(20), nullable=False),
        sa.Column('vehicle_type', sa.String(50), nullable=False),
        sa.Column('zone_id', sa.Integer(), sa.ForeignKey('zone.id'), nullable=True),
        sa.Column('current_parking_zone_id', sa.Integer(), sa.ForeignKey('parking_zone.id'), nullable=True),
        sa.Column('latitude', sa.Float(), nullable=False),
        sa.Column('longitude', sa.Float(), nullable=False),
        sa.Column('battery_level', sa.Integer(), nullable=False),
        sa.Column('needs_battery_replacement', sa.Boolean(), nullable=False),
        sa.Column('is_available', sa.Boolean(), nullable=False),
        sa.Column('last_updated', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint('battery_level >= 0 AND battery_level <= 100', name='ck_vehicle_battery_level'),
    )
    op.create_index('ix_vehicle_id', 'vehicle', ['id'])
    op.create_index('ix_vehicle_zone_id', 'vehicle', ['zone_id'])

    op.create_table(
        'route',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('assigned_swapper_id', sa.Integer(), sa.ForeignKey('user.id'), nullable=False),
        sa.Column('created_by_user_id', sa.Integer(), sa.ForeignKey('user.id'), nullable=True),
        sa.Column('zone_id', sa.Integer(), sa.ForeignKey('zone.id'), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('target_duration_minutes', sa.Integer(), nullable=False),
        sa.Column('status', route_status, nullable=False),
        sa.Column('estimated_duration_minutes', sa.Integer(), nullable=True),
        sa.Column('estimated_distance_km', sa.Float(), nullable=True),
        sa.Column('total_vehicle_count', sa.Integer(), nullable=False),
        sa.Column('confirmed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('started_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            'target_duration_minutes >= 60 AND target_duration_minutes <= 1440',
            name='ck_route_target_duration',
        ),
    )
    op.create_index('ix_route_id', 'route', ['id'])
    op.create_index('ix_route_assigned_swapper_id', 'route', ['assigned_swapper_id'])
    op.create_index('ix_route_zone_id', 'route', ['zone_id'])
    op.create_index('ix_route_status', 'route', ['status'])

    op.create_table(
        'route_stop',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('route_id', sa.Integer(), sa.ForeignKey('route.id', ondelete='CASCADE'), nullable=False),
        sa.Column('vehicle_id', sa.Integer(), sa.ForeignKey('vehicle.id'), nullable=False),
        sa.Column('sequence_order', sa.Integer(), nullable=False),
        sa.Column('status', route_stop_status, nullable=False),
        sa.Column('estimated_arrival_offset', sa.Interval(), nullable=False),
        sa.Column('estimated_duration_at_stop', sa.Interval(), nullable=False),
        sa.Column('actual_arrival_time', sa.DateTime(timezone=True), nullable=True),
        sa.Column('actual_departure_time', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('route_id', 'sequence_order', name='uq_route_stop_route_order'),
        sa.CheckConstraint('sequence_order >= 1', name='ck_route_stop_sequence_order'),
    )
    op.create_index('ix_route_stop_id', 'route_stop', ['id'])
    op.create_index('ix_route_stop_route_id', 'route_stop', ['route_id'])

    op.create_table(
        'route_generation_request',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('requested_by_user_id', sa.Integer(), sa.ForeignKey('user.id'), nullable=True),
        sa.Column('swapper_id', sa.Integer(), sa.ForeignKey('user.id'), nullable=False),
        sa.Column('zone_id', sa.Integer(), sa.ForeignKey('zone.id'), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('target_duration_minutes', sa.Integer(), nullable=False),
        sa.Column('battery_threshold', sa.Integer(), nullable=False),
        sa.Column('vehicle_ids', sa.JSON(), nullable=True),
        sa.Column('status', generation_status, nullable=False),
        sa.Column('started_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('error_message', sa.Text(), nullable=True),
        sa.Column('route_id', sa.Integer(), sa.ForeignKey('route.id'), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_route_generation_request_id', 'route_generation_request', ['id'])
    op.create_index('ix_route_generation_request_zone_id', 'route_generation_request', ['zone_id'])
    op.create_index('ix_route_generation_request_status', 'route_generation_request', ['status'])


def downgrade() -> None:
    """Drop all tables and enum types."""
    op.drop_table('route_generation_request')
    op.drop_table('route_stop')
    op.drop_table('route')
    op.drop_table('vehicle')
    op.drop_table('parking_zone')
    op.drop_table('zone')
    op.drop_table('user')

    bind = op.get_bind()
    for enum_type in (generation_status, route_stop_status, route_status, user_role):
        enum_type.drop(bind, checkfirst=True)
