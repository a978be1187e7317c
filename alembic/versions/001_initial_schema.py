"""Initial schema: users, devices, device configs, measurements, events, firmware

Revision ID: 001
Revises: 
Create Date: 2026-10-01 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Create users table
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('username', sa.String(length=64), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('last_login_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("role IN ('admin', 'user')", name='check_valid_role'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('username')
    )

    # Create devices table
    op.create_table(
        'devices',
        sa.Column('device_id', sa.String(length=128), nullable=False),
        sa.Column('serial_number', sa.String(length=128), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=True),
        sa.Column('custom_name', sa.String(length=100), nullable=True),
        sa.Column('location', sa.String(length=255), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('model', sa.String(length=64), nullable=True),
        sa.Column('firmware_version', sa.String(length=32), nullable=True),
        sa.Column('owner_id', sa.Integer(), nullable=True),
        sa.Column('first_seen', sa.DateTime(timezone=True), nullable=False),
        sa.Column('last_seen', sa.DateTime(timezone=True), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.ForeignKeyConstraint(['owner_id'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('device_id'),
        sa.UniqueConstraint('serial_number')
    )
    op.create_index('idx_devices_last_seen', 'devices', ['last_seen'])
    op.create_index('idx_devices_owner_id', 'devices', ['owner_id'])

    # Create device_configs table (one row per device)
    op.create_table(
        'device_configs',
        sa.Column('device_id', sa.String(length=128), nullable=False),
        sa.Column('country', sa.String(length=8), nullable=False),
        sa.Column('pm_standard', sa.String(length=16), nullable=False),
        sa.Column('led_bar_mode', sa.String(length=16), nullable=False),
        sa.Column('abc_days', sa.Integer(), nullable=False),
        sa.Column('tvoc_learning_offset', sa.Integer(), nullable=False),
        sa.Column('nox_learning_offset', sa.Integer(), nullable=False),
        sa.Column('mqtt_broker_url', sa.String(length=255), nullable=False),
        sa.Column('temperature_unit', sa.String(length=4), nullable=False),
        sa.Column('configuration_control', sa.String(length=16), nullable=False),
        sa.Column('post_data_to_airgradient', sa.Boolean(), nullable=False),
        sa.Column('led_bar_brightness', sa.Integer(), nullable=False),
        sa.Column('display_brightness', sa.Integer(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['device_id'], ['devices.device_id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('device_id')
    )

    # Create measurements table
    op.create_table(
        'measurements',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('device_id', sa.String(length=128), nullable=False),
        sa.Column('timestamp', sa.DateTime(timezone=True), nullable=False),
        sa.Column('wifi_rssi', sa.Integer(), nullable=True),
        sa.Column('rco2', sa.Integer(), nullable=True),
        sa.Column('pm01', sa.Float(), nullable=True),
        sa.Column('pm02', sa.Float(), nullable=True),
        sa.Column('pm10', sa.Float(), nullable=True),
        sa.Column('pm02_compensated', sa.Float(), nullable=True),
        sa.Column('pm003_count', sa.Integer(), nullable=True),
        sa.Column('pm005_count', sa.Integer(), nullable=True),
        sa.Column('pm01_count', sa.Integer(), nullable=True),
        sa.Column('pm02_count', sa.Integer(), nullable=True),
        sa.Column('pm50_count', sa.Integer(), nullable=True),
        sa.Column('pm10_count', sa.Integer(), nullable=True),
        sa.Column('atmp', sa.Float(), nullable=True),
        sa.Column('atmp_compensated', sa.Float(), nullable=True),
        sa.Column('rhum', sa.Float(), nullable=True),
        sa.Column('rhum_compensated', sa.Float(), nullable=True),
        sa.Column('tvoc_index', sa.Integer(), nullable=True),
        sa.Column('tvoc_raw', sa.Integer(), nullable=True),
        sa.Column('nox_index', sa.Integer(), nullable=True),
        sa.Column('nox_raw', sa.Integer(), nullable=True),
        sa.Column('boot', sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(['device_id'], ['devices.device_id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_measurements_device_timestamp', 'measurements', ['device_id', 'timestamp'])
    op.create_index('idx_measurements_timestamp', 'measurements', ['timestamp'])

    # Create events table (device reference survives device deletion as NULL)
    op.create_table(
        'events',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('device_id', sa.String(length=128), nullable=True),
        sa.Column('event_type', sa.String(length=50), nullable=False),
        sa.Column('event_data', sa.JSON(), nullable=True),
        sa.Column('timestamp', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['device_id'], ['devices.device_id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_events_device_timestamp', 'events', ['device_id', 'timestamp'])
    op.create_index('idx_events_timestamp', 'events', ['timestamp'])

    # Create firmware table
    op.create_table(
        'firmware',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('version', sa.String(length=32), nullable=False),
        sa.Column('filename', sa.String(length=255), nullable=False),
        sa.Column('file_path', sa.String(length=512), nullable=False),
        sa.Column('file_size', sa.BigInteger(), nullable=False),
        sa.Column('uploaded_by', sa.String(length=64), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('uploaded_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('version')
    )
    op.create_index('idx_firmware_uploaded_at', 'firmware', ['uploaded_at'])


def downgrade() -> None:
    op.drop_index('idx_firmware_uploaded_at', table_name='firmware')
    op.drop_table('firmware')
    op.drop_index('idx_events_timestamp', table_name='events')
    op.drop_index('idx_events_device_timestamp', table_name='events')
    op.drop_table('events')
    op.drop_index('idx_measurements_timestamp', table_name='measurements')
    op.drop_index('idx_measurements_device_timestamp', table_name='measurements')
    op.drop_table('measurements')
    op.drop_table('device_configs')
    op.drop_index('idx_devices_owner_id', table_name='devices')
    op.drop_index('idx_devices_last_seen', table_name='devices')
    op.drop_table('devices')
    op.drop_table('users')
