"""Create initial schema

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '20261019_0001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

LISTING_STATUS = ('DRAFT', 'PUBLISHED', 'ARCHIVED')
LISTING_KIND = ('STAY', 'FOOD_EXPERIENCE')


def _has_table(bind, name: str) -> bool:
    try:
        insp = inspect(bind)
        return insp.has_table(name)
    except Exception:
        return False


def _enum(bind, values, name):
    # Shared by several tables, so on PostgreSQL the type is created once up front
    if bind.dialect.name == 'postgresql':
        postgresql.ENUM(*values, name=name).create(bind, checkfirst=True)
        return postgresql.ENUM(*values, name=name, create_type=False)
    return sa.Enum(*values, name=name)


def upgrade() -> None:
    bind = op.get_bind()

    listingstatus_enum = _enum(bind, LISTING_STATUS, 'listingstatus')
    listingkind_enum = _enum(bind, LISTING_KIND, 'listingkind')

    if not _has_table(bind, 'users'):
        op.create_table('users',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('email', sa.String(length=255), nullable=False),
            sa.Column('hashed_password', sa.String(length=255), nullable=False),
            sa.Column('name', sa.String(length=200), nullable=False),
            sa.Column('avatar_url', sa.String(length=500), nullable=True),
            sa.Column('is_host', sa.Boolean(), server_default=sa.false(), nullable=False),
            sa.Column('is_admin', sa.Boolean(), server_default=sa.false(), nullable=False),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)
        op.create_index(op.f('ix_users_id'), 'users', ['id'], unique=False)

    if not _has_table(bind, 'stays'):
        op.create_table('stays',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('host_id', sa.Integer(), nullable=False),
            sa.Column('title', sa.String(length=200), nullable=False),
            sa.Column('description', sa.Text(), nullable=False),
            sa.Column('price_per_night', sa.Numeric(precision=10, scale=2), nullable=False),
            sa.Column('status', listingstatus_enum, server_default='DRAFT', nullable=False),
            sa.Column('property_type', sa.String(length=50), nullable=True),
            sa.Column('bedrooms', sa.Integer(), nullable=True),
            sa.Column('beds', sa.Integer(), nullable=True),
            sa.Column('bathrooms', sa.Integer(), nullable=True),
            sa.Column('max_guests', sa.Integer(), nullable=True),
            sa.Column('amenities', sa.Text(), nullable=True),
            sa.Column('location_name', sa.String(length=300), nullable=False),
            sa.Column('address', sa.String(length=300), nullable=True),
            sa.Column('city', sa.String(length=120), nullable=True),
            sa.Column('state', sa.String(length=120), nullable=True),
            sa.Column('zipcode', sa.String(length=20), nullable=True),
            sa.Column('latitude', sa.Float(), nullable=True),
            sa.Column('longitude', sa.Float(), nullable=True),
            sa.Column('is_featured', sa.Boolean(), server_default=sa.false(), nullable=False),
            sa.Column('rating', sa.Float(), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.Column('updated_at', sa.DateTime(), nullable=False),
            sa.ForeignKeyConstraint(['host_id'], ['users.id'], ),
            sa.PrimaryKeyConstraint('id'),
            sqlite_autoincrement=True,
        )
        op.create_index(op.f('ix_stays_id'), 'stays', ['id'], unique=False)
        op.create_index(op.f('ix_stays_host_id'), 'stays', ['host_id'], unique=False)
        op.create_index(op.f('ix_stays_status'), 'stays', ['status'], unique=False)
        op.create_index(op.f('ix_stays_zipcode'), 'stays', ['zipcode'], unique=False)

    if not _has_table(bind, 'stay_images'):
        op.create_table('stay_images',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('stay_id', sa.Integer(), nullable=False),
            sa.Column('image_path', sa.String(length=500), nullable=False),
            sa.Column('display_order', sa.Integer(), server_default='0', nullable=False),
            sa.Column('is_primary', sa.Boolean(), server_default=sa.false(), nullable=False),
            sa.ForeignKeyConstraint(['stay_id'], ['stays.id'], ),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_stay_images_stay_id'), 'stay_images', ['stay_id'], unique=False)

    if not _has_table(bind, 'stay_availability'):
        op.create_table('stay_availability',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('stay_id', sa.Integer(), nullable=False),
            sa.Column('date', sa.Date(), nullable=False),
            sa.Column('is_available', sa.Boolean(), server_default=sa.true(), nullable=False),
            sa.Column('price_override', sa.Numeric(precision=10, scale=2), nullable=True),
            sa.ForeignKeyConstraint(['stay_id'], ['stays.id'], ),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('stay_id', 'date', name='uq_stay_availability_date')
        )
        op.create_index(op.f('ix_stay_availability_stay_id'), 'stay_availability', ['stay_id'], unique=False)

    if not _has_table(bind, 'food_experiences'):
        op.create_table('food_experiences',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('host_id', sa.Integer(), nullable=False),
            sa.Column('title', sa.String(length=200), nullable=False),
            sa.Column('description', sa.Text(), nullable=False),
            sa.Column('price_per_person', sa.Numeric(precision=10, scale=2), nullable=False),
            sa.Column('status', listingstatus_enum, server_default='DRAFT', nullable=False),
            sa.Column('cuisine_type', sa.String(length=80), nullable=False),
            sa.Column('menu_description', sa.Text(), nullable=True),
            sa.Column('duration', sa.String(length=50), nullable=True),
            sa.Column('language', sa.String(length=50), nullable=True),
            sa.Column('max_guests', sa.Integer(), nullable=True),
            sa.Column('location_name', sa.String(length=300), nullable=False),
            sa.Column('address', sa.String(length=300), nullable=True),
            sa.Column('city', sa.String(length=120), nullable=True),
            sa.Column('state', sa.String(length=120), nullable=True),
            sa.Column('zipcode', sa.String(length=20), nullable=True),
            sa.Column('latitude', sa.Float(), nullable=True),
            sa.Column('longitude', sa.Float(), nullable=True),
            sa.Column('is_featured', sa.Boolean(), server_default=sa.false(), nullable=False),
            sa.Column('rating', sa.Float(), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.Column('updated_at', sa.DateTime(), nullable=False),
            sa.ForeignKeyConstraint(['host_id'], ['users.id'], ),
            sa.PrimaryKeyConstraint('id'),
            sqlite_autoincrement=True,
        )
        op.create_index(op.f('ix_food_experiences_id'), 'food_experiences', ['id'], unique=False)
        op.create_index(op.f('ix_food_experiences_host_id'), 'food_experiences', ['host_id'], unique=False)
        op.create_index(op.f('ix_food_experiences_status'), 'food_experiences', ['status'], unique=False)
        op.create_index(op.f('ix_food_experiences_cuisine_type'), 'food_experiences', ['cuisine_type'], unique=False)
        op.create_index(op.f('ix_food_experiences_zipcode'), 'food_experiences', ['zipcode'], unique=False)

    if not _has_table(bind, 'food_experience_images'):
        op.create_table('food_experience_images',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('experience_id', sa.Integer(), nullable=False),
            sa.Column('image_path', sa.String(length=500), nullable=False),
            sa.Column('display_order', sa.Integer(), server_default='0', nullable=False),
            sa.Column('is_primary', sa.Boolean(), server_default=sa.false(), nullable=False),
            sa.ForeignKeyConstraint(['experience_id'], ['food_experiences.id'], ),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_food_experience_images_experience_id'), 'food_experience_images', ['experience_id'], unique=False)

    if not _has_table(bind, 'food_experience_availability'):
        op.create_table('food_experience_availability',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('experience_id', sa.Integer(), nullable=False),
            sa.Column('date', sa.Date(), nullable=False),
            sa.Column('is_available', sa.Boolean(), server_default=sa.true(), nullable=False),
            sa.Column('price_override', sa.Numeric(precision=10, scale=2), nullable=True),
            sa.Column('start_time', sa.Time(), nullable=True),
            sa.Column('end_time', sa.Time(), nullable=True),
            sa.Column('available_spots', sa.Integer(), server_default='0', nullable=False),
            sa.ForeignKeyConstraint(['experience_id'], ['food_experiences.id'], ),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('experience_id', 'date', name='uq_food_availability_date')
        )
        op.create_index(op.f('ix_food_experience_availability_experience_id'), 'food_experience_availability', ['experience_id'], unique=False)

    if not _has_table(bind, 'favorites'):
        op.create_table('favorites',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('user_id', sa.Integer(), nullable=False),
            sa.Column('item_type', listingkind_enum, nullable=False),
            sa.Column('item_id', sa.Integer(), nullable=False),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('user_id', 'item_type', 'item_id', name='uq_favorite_item')
        )
        op.create_index(op.f('ix_favorites_user_id'), 'favorites', ['user_id'], unique=False)

    if not _has_table(bind, 'reviews'):
        op.create_table('reviews',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('author_id', sa.Integer(), nullable=False),
            sa.Column('target_type', listingkind_enum, nullable=False),
            sa.Column('target_id', sa.Integer(), nullable=False),
            sa.Column('rating', sa.Integer(), nullable=False),
            sa.Column('comment', sa.Text(), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.ForeignKeyConstraint(['author_id'], ['users.id'], ),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index('ix_reviews_target', 'reviews', ['target_type', 'target_id'], unique=False)

    if not _has_table(bind, 'conversations'):
        op.create_table('conversations',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('user_id_1', sa.Integer(), nullable=False),
            sa.Column('user_id_2', sa.Integer(), nullable=False),
            sa.Column('listing_id', sa.Integer(), nullable=True),
            sa.Column('listing_type', sa.String(length=30), nullable=True),
            sa.Column('title', sa.String(length=200), nullable=True),
            sa.Column('status', sa.String(length=20), server_default='active', nullable=False),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.Column('last_message_at', sa.DateTime(), nullable=False),
            sa.ForeignKeyConstraint(['user_id_1'], ['users.id'], ),
            sa.ForeignKeyConstraint(['user_id_2'], ['users.id'], ),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('user_id_1', 'user_id_2', 'listing_id', 'listing_type', name='uq_conversation_listing')
        )
        op.create_index(op.f('ix_conversations_user_id_1'), 'conversations', ['user_id_1'], unique=False)
        op.create_index(op.f('ix_conversations_user_id_2'), 'conversations', ['user_id_2'], unique=False)
        op.create_index(op.f('ix_conversations_last_message_at'), 'conversations', ['last_message_at'], unique=False)

    if not _has_table(bind, 'messages'):
        op.create_table('messages',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('conversation_id', sa.Integer(), nullable=False),
            sa.Column('sender_id', sa.Integer(), nullable=False),
            sa.Column('content', sa.Text(), nullable=False),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.ForeignKeyConstraint(['conversation_id'], ['conversations.id'], ),
            sa.ForeignKeyConstraint(['sender_id'], ['users.id'], ),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_messages_conversation_id'), 'messages', ['conversation_id'], unique=False)


def downgrade() -> None:
    bind = op.get_bind()
    dialect_name = bind.dialect.name
    op.drop_table('messages')
    op.drop_table('conversations')
    op.drop_table('reviews')
    op.drop_table('favorites')
    op.drop_table('food_experience_availability')
    op.drop_table('food_experience_images')
    op.drop_table('food_experiences')
    op.drop_table('stay_availability')
    op.drop_table('stay_images')
    op.drop_table('stays')
    op.drop_table('users')

    # Drop ENUM types for PostgreSQL
    if dialect_name == 'postgresql':
        sa.Enum(name='listingkind').drop(bind, checkfirst=True)
        sa.Enum(name='listingstatus').drop(bind, checkfirst=True)
