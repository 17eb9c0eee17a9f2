"""create_ra_tables

Revision ID: 3f1c2a9d7e41
Revises:
Create Date: 2026-10-19 09:12:40

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '3f1c2a9d7e41'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """
    Create users, devices, sessions, sensors, measures and blobs.
    """
    print("[MIGRATION] Creating RA tables...")

    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('username', sa.String(length=100), nullable=False),
        sa.Column('prefix', sa.String(length=50), nullable=False),
        sa.Column('role', sa.String(length=20), server_default='user', nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('username'),
        sa.UniqueConstraint('prefix')
    )

    op.create_table(
        'devices',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('passphrase', sa.String(length=500), nullable=False),
        sa.Column('desc', sa.Text(), nullable=True),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('monitoring', sa.Boolean(), nullable=False),
        sa.Column('json_token', sa.String(length=100), nullable=True),
        sa.Column('blob_token', sa.String(length=100), nullable=True),
        sa.Column('app_name', sa.String(length=100), nullable=True),
        sa.Column('config_data', sa.Text(), nullable=True),
        sa.Column('config_ver', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('first_login', sa.DateTime(), nullable=True),
        sa.Column('last_login', sa.DateTime(), nullable=True),
        sa.Column('last_bad_login', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name')
    )
    op.create_index(op.f('ix_devices_user_id'), 'devices', ['user_id'], unique=False)

    op.create_table(
        'sessions',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('hash', sa.String(length=200), nullable=False),
        sa.Column('device_id', sa.Integer(), nullable=False),
        sa.Column('session_key', sa.String(length=200), nullable=False),
        sa.Column('started', sa.DateTime(), nullable=False),
        sa.Column('remote_ip', sa.String(length=50), nullable=True),
        sa.ForeignKeyConstraint(['device_id'], ['devices.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_sessions_device_id'), 'sessions', ['device_id'], unique=False)

    op.create_table(
        'sensors',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('device_id', sa.Integer(), nullable=False),
        sa.Column('channel_id', sa.Integer(), nullable=True),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('desc', sa.Text(), nullable=True),
        sa.Column('device_class', sa.Integer(), nullable=False),
        sa.Column('value_type', sa.Integer(), nullable=False),
        sa.Column('msg_rate', sa.Integer(), nullable=False),
        sa.Column('preprocess_data', sa.Boolean(), nullable=False),
        sa.Column('preprocess_factor', sa.Float(), nullable=True),
        sa.Column('last_data_time', sa.DateTime(), nullable=True),
        sa.Column('last_out_value', sa.Float(), nullable=True),
        sa.Column('imp_count', sa.Integer(), nullable=True),
        sa.Column('data_session', sa.String(length=100), nullable=True),
        sa.ForeignKeyConstraint(['device_id'], ['devices.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('device_id', 'name', name='uq_sensor_device_name')
    )
    op.create_index(op.f('ix_sensors_device_id'), 'sensors', ['device_id'], unique=False)
    op.create_index('idx_sensor_device_channel', 'sensors', ['device_id', 'channel_id'], unique=False)

    op.create_table(
        'measures',
        sa.Column('id', sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column('sensor_id', sa.Integer(), nullable=False),
        sa.Column('data_time', sa.DateTime(), nullable=False),
        sa.Column('server_time', sa.DateTime(), nullable=False),
        sa.Column('s_value', sa.Float(), nullable=True),
        sa.Column('out_value', sa.Float(), nullable=True),
        sa.Column('session_id', sa.Integer(), nullable=True),
        sa.Column('remote_ip', sa.String(length=50), nullable=True),
        sa.ForeignKeyConstraint(['sensor_id'], ['sensors.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_measure_sensor_time', 'measures', ['sensor_id', 'data_time'], unique=False)

    op.create_table(
        'blobs',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('device_id', sa.Integer(), nullable=False),
        sa.Column('data_time', sa.DateTime(), nullable=False),
        sa.Column('server_time', sa.DateTime(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('extension', sa.String(length=20), nullable=True),
        sa.Column('session_id', sa.Integer(), nullable=True),
        sa.Column('remote_ip', sa.String(length=50), nullable=True),
        sa.Column('filesize', sa.Integer(), nullable=True),
        sa.Column('status', sa.Integer(), nullable=False),
        sa.Column('filename', sa.String(length=255), nullable=True),
        sa.ForeignKeyConstraint(['device_id'], ['devices.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_blob_device_time', 'blobs', ['device_id', 'data_time'], unique=False)

    print("[MIGRATION] ✅ RA tables created")


def downgrade() -> None:
    print("[MIGRATION] Dropping RA tables...")

    op.drop_index('idx_blob_device_time', table_name='blobs')
    op.drop_table('blobs')
    op.drop_index('idx_measure_sensor_time', table_name='measures')
    op.drop_table('measures')
    op.drop_index('idx_sensor_device_channel', table_name='sensors')
    op.drop_index(op.f('ix_sensors_device_id'), table_name='sensors')
    op.drop_table('sensors')
    op.drop_index(op.f('ix_sessions_device_id'), table_name='sessions')
    op.drop_table('sessions')
    op.drop_index(op.f('ix_devices_user_id'), table_name='devices')
    op.drop_table('devices')
    op.drop_table('users')
