"""initial schema: posts, threads, comments, subscriptions, notifications

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


revision: str = '0001_initial_schema'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


ENUMS = {
    'language_level': ('beginner', 'intermediate', 'advanced', 'native'),
    'badge_type': ('necromancer',),
    'notification_type': (
        'thread_comment', 'post_comment', 'post_clap',
        'thread_comment_thanks', 'new_post', 'new_follower',
    ),
    'notification_read_status': ('unread', 'read'),
    'email_notification_type': ('thread_comment', 'post_comment', 'new_post'),
    'email_delivery_status': ('pending', 'sent', 'failed'),
}


def _enum(name: str):
    # Types are created once up front; columns must not create them again
    values = ENUMS[name]
    return sa.Enum(*values, name=name).with_variant(
        postgresql.ENUM(*values, name=name, create_type=False), 'postgresql'
    )


def _base_columns():
    return [
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    ]


def _fk(column: str, target: str, ondelete: str = 'CASCADE', nullable: bool = False):
    return sa.Column(column, sa.Uuid(), sa.ForeignKey(target, ondelete=ondelete), nullable=nullable)


def _create(table: str, *columns, indexes=(), unique_indexes=()):
    op.create_table(table, *_base_columns(), *columns)
    op.create_index(f'ix_{table}_id', table, ['id'])
    for column in indexes:
        op.create_index(f'ix_{table}_{column}', table, [column])
    for column in unique_indexes:
        op.create_index(f'ix_{table}_{column}', table, [column], unique=True)


SUB_NOTIFICATION_TABLES = (
    ('thread_comment_notifications', 'comment_id', 'comments.id'),
    ('post_comment_notifications', 'post_comment_id', 'post_comments.id'),
    ('post_clap_notifications', 'post_clap_id', 'post_claps.id'),
    ('thread_comment_thanks_notifications', 'thanks_id', 'comment_thanks.id'),
    ('new_post_notifications', 'post_id', 'posts.id'),
    ('new_follower_notifications', 'follower_id', 'users.id'),
)


def upgrade() -> None:
    bind = op.get_bind()
    if bind.dialect.name == 'postgresql':
        for name, values in ENUMS.items():
            postgresql.ENUM(*values, name=name).create(bind, checkfirst=True)

    # ---------------- users & languages ----------------
    _create(
        'users',
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('handle', sa.String(50), nullable=False),
        sa.Column('name', sa.String(100), nullable=True),
        sa.Column('avatar_url', sa.String(500), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        unique_indexes=('email', 'handle'),
    )
    _create(
        'languages',
        sa.Column('name', sa.String(100), nullable=False, unique=True),
        sa.Column('code', sa.String(10), nullable=False, unique=True),
    )
    _create(
        'user_languages',
        _fk('user_id', 'users.id'),
        _fk('language_id', 'languages.id'),
        sa.Column('level', _enum('language_level'), nullable=False),
        sa.UniqueConstraint('user_id', 'language_id', name='uq_user_language'),
        indexes=('user_id', 'language_id'),
    )

    # ---------------- posts ----------------
    _create(
        'posts',
        _fk('author_id', 'users.id'),
        sa.Column('language_id', sa.Uuid(), sa.ForeignKey('languages.id'), nullable=False),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('body', sa.Text(), nullable=False),
        sa.Column('headline_image_url', sa.String(500), nullable=True),
        indexes=('author_id', 'language_id'),
    )
    _create(
        'post_claps',
        _fk('author_id', 'users.id'),
        _fk('post_id', 'posts.id'),
        sa.UniqueConstraint('author_id', 'post_id', name='uq_post_clap_author_post'),
        indexes=('author_id', 'post_id'),
    )
    _create(
        'post_comments',
        _fk('author_id', 'users.id'),
        _fk('post_id', 'posts.id'),
        sa.Column('body', sa.Text(), nullable=False),
        sa.Column('author_language_level', _enum('language_level'), nullable=False),
        indexes=('author_id', 'post_id'),
    )

    # ---------------- threads ----------------
    _create(
        'threads',
        _fk('post_id', 'posts.id'),
        sa.Column('start_index', sa.Integer(), nullable=False),
        sa.Column('end_index', sa.Integer(), nullable=False),
        sa.Column('highlighted_content', sa.Text(), nullable=False),
        sa.Column('archived', sa.Boolean(), nullable=False),
        indexes=('post_id',),
    )
    _create(
        'comments',
        _fk('author_id', 'users.id'),
        _fk('thread_id', 'threads.id'),
        sa.Column('body', sa.Text(), nullable=False),
        sa.Column('author_language_level', _enum('language_level'), nullable=False),
        indexes=('author_id', 'thread_id'),
    )
    _create(
        'comment_thanks',
        _fk('author_id', 'users.id'),
        _fk('comment_id', 'comments.id'),
        sa.UniqueConstraint('author_id', 'comment_id', name='uq_comment_thanks_author_comment'),
        indexes=('author_id', 'comment_id'),
    )

    # ---------------- subscriptions, follows, badges ----------------
    _create(
        'thread_subscriptions',
        _fk('user_id', 'users.id'),
        _fk('thread_id', 'threads.id'),
        sa.UniqueConstraint('user_id', 'thread_id', name='uq_thread_subscription_user_thread'),
        indexes=('user_id', 'thread_id'),
    )
    _create(
        'post_comment_subscriptions',
        _fk('user_id', 'users.id'),
        _fk('post_id', 'posts.id'),
        sa.UniqueConstraint('user_id', 'post_id', name='uq_post_comment_subscription_user_post'),
        indexes=('user_id', 'post_id'),
    )
    _create(
        'follows',
        _fk('follower_id', 'users.id'),
        _fk('following_id', 'users.id'),
        sa.UniqueConstraint('follower_id', 'following_id', name='uq_follow_pair'),
        sa.CheckConstraint('follower_id <> following_id', name='ck_follow_not_self'),
        indexes=('follower_id', 'following_id'),
    )
    _create(
        'user_badges',
        _fk('user_id', 'users.id'),
        sa.Column('type', _enum('badge_type'), nullable=False),
        sa.UniqueConstraint('user_id', 'type', name='uq_user_badge_type'),
        indexes=('user_id',),
    )

    # ---------------- notifications ----------------
    _create(
        'in_app_notifications',
        _fk('user_id', 'users.id'),
        sa.Column('type', _enum('notification_type'), nullable=False),
        sa.Column('read_status', _enum('notification_read_status'), nullable=False),
        _fk('post_id', 'posts.id', ondelete='SET NULL', nullable=True),
        _fk('triggering_user_id', 'users.id', ondelete='SET NULL', nullable=True),
        sa.Column('bumped_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('read_at', sa.DateTime(timezone=True), nullable=True),
        indexes=('user_id', 'type', 'read_status', 'post_id', 'bumped_at'),
    )
    for table, column, target in SUB_NOTIFICATION_TABLES:
        _create(
            table,
            _fk('notification_id', 'in_app_notifications.id'),
            _fk(column, target, ondelete='SET NULL', nullable=True),
            indexes=('notification_id',),
        )

    _create(
        'email_notifications',
        _fk('user_id', 'users.id'),
        sa.Column('type', _enum('email_notification_type'), nullable=False),
        sa.Column('status', _enum('email_delivery_status'), nullable=False),
        _fk('comment_id', 'comments.id', ondelete='SET NULL', nullable=True),
        _fk('post_comment_id', 'post_comments.id', ondelete='SET NULL', nullable=True),
        _fk('post_id', 'posts.id', ondelete='SET NULL', nullable=True),
        sa.Column('error', sa.Text(), nullable=True),
        sa.Column('sent_at', sa.DateTime(timezone=True), nullable=True),
        indexes=('user_id', 'status'),
    )


def downgrade() -> None:
    op.drop_table('email_notifications')
    for table, _, _ in reversed(SUB_NOTIFICATION_TABLES):
        op.drop_table(table)
    for table in (
        'in_app_notifications',
        'user_badges',
        'follows',
        'post_comment_subscriptions',
        'thread_subscriptions',
        'comment_thanks',
        'comments',
        'threads',
        'post_comments',
        'post_claps',
        'posts',
        'user_languages',
        'languages',
        'users',
    ):
        op.drop_table(table)

    bind = op.get_bind()
    if bind.dialect.name == 'postgresql':
        for name in ENUMS:
            postgresql.ENUM(name=name).drop(bind, checkfirst=True)
