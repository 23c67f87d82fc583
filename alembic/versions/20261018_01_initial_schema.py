"""
Initial schema: accounts, sessions, catalog, per-user library.

- users / user_sessions
- genres / animes / anime_genres
- seasons / episodes / video_sources
- watchlist / favorites / watch_progress / downloads

Every child foreign key uses ON DELETE CASCADE.
"""

from alembic import op
import sqlalchemy as sa

# Revision identifiers, used by Alembic.
revision = "20261018_01_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


user_role = sa.Enum("User", "Manager", "Admin", name="user_role")
user_status = sa.Enum("Active", "Blocked", name="user_status")
anime_type = sa.Enum("TV", "Movie", "OVA", "Special", name="anime_type")
anime_status = sa.Enum("Ongoing", "Completed", "Upcoming", name="anime_status")


def _ts(name: str, nullable: bool = False) -> sa.Column:
    return sa.Column(name, sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=nullable)


def upgrade() -> None:
    # --- Accounts ---
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("username", sa.String(64), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password", sa.String(255), nullable=False),
        sa.Column("role", user_role, nullable=False, server_default="User"),
        sa.Column("status", user_status, nullable=False, server_default="Active"),
        sa.Column("avatar", sa.String(1024), nullable=True),
        _ts("created_at"),
        sa.CheckConstraint("length(trim(username)) > 0", name="ck_users_username_not_blank"),
        sa.CheckConstraint("length(trim(email)) > 0", name="ck_users_email_not_blank"),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "user_sessions",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("token_hash", sa.String(64), nullable=False),
        sa.Column("ip_address", sa.String(64), nullable=True),
        sa.Column("device_info", sa.String(512), nullable=True),
        _ts("created_at"),
        _ts("last_active"),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE", name="fk_user_sessions_user_id_users"),
        sa.PrimaryKeyConstraint("id", name="pk_user_sessions"),
        sa.UniqueConstraint("token_hash", name="uq_user_sessions_token_hash"),
    )
    op.create_index("ix_user_sessions_user_id", "user_sessions", ["user_id"])
    op.create_index("ix_user_sessions_user_last_active", "user_sessions", ["user_id", "last_active"])
    op.create_index("ix_user_sessions_expires_at", "user_sessions", ["expires_at"])

    # --- Catalog ---
    op.create_table(
        "genres",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(80), nullable=False),
        sa.CheckConstraint("length(trim(name)) > 0", name="ck_genres_name_not_blank"),
        sa.PrimaryKeyConstraint("id", name="pk_genres"),
        sa.UniqueConstraint("name", name="uq_genres_name"),
    )

    op.create_table(
        "animes",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("type", anime_type, nullable=False),
        sa.Column("status", anime_status, nullable=False),
        sa.Column("release_year", sa.Integer(), nullable=True),
        sa.Column("rating", sa.Numeric(3, 1), nullable=True),
        sa.Column("duration", sa.String(64), nullable=True),
        sa.Column("cover_image", sa.String(1024), nullable=True),
        sa.Column("banner_image", sa.String(1024), nullable=True),
        sa.Column("featured", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        _ts("created_at"),
        _ts("updated_at"),
        sa.CheckConstraint("length(trim(title)) > 0", name="ck_animes_title_not_blank"),
        sa.CheckConstraint("rating IS NULL OR (rating >= 0 AND rating <= 10)", name="ck_animes_rating_range"),
        sa.CheckConstraint(
            "release_year IS NULL OR (release_year BETWEEN 1900 AND 2100)", name="ck_animes_release_year_range"
        ),
        sa.PrimaryKeyConstraint("id", name="pk_animes"),
    )
    op.create_index("ix_animes_title", "animes", ["title"])
    op.create_index("ix_animes_status_type", "animes", ["status", "type"])
    op.create_index("ix_animes_release_year", "animes", ["release_year"])

    op.create_table(
        "anime_genres",
        sa.Column("anime_id", sa.Integer(), nullable=False),
        sa.Column("genre_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["anime_id"], ["animes.id"], ondelete="CASCADE", name="fk_anime_genres_anime_id_animes"),
        sa.ForeignKeyConstraint(["genre_id"], ["genres.id"], ondelete="CASCADE", name="fk_anime_genres_genre_id_genres"),
        sa.PrimaryKeyConstraint("anime_id", "genre_id", name="pk_anime_genres"),
    )
    op.create_index("ix_anime_genres_genre_id", "anime_genres", ["genre_id"])

    op.create_table(
        "seasons",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("anime_id", sa.Integer(), nullable=False),
        sa.Column("number", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(255), nullable=True),
        sa.ForeignKeyConstraint(["anime_id"], ["animes.id"], ondelete="CASCADE", name="fk_seasons_anime_id_animes"),
        sa.CheckConstraint("number >= 0", name="ck_seasons_number_nonneg"),
        sa.PrimaryKeyConstraint("id", name="pk_seasons"),
        sa.UniqueConstraint("anime_id", "number", name="uq_seasons_anime_number"),
    )
    op.create_index("ix_seasons_anime_id", "seasons", ["anime_id"])

    op.create_table(
        "episodes",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("season_id", sa.Integer(), nullable=False),
        sa.Column("number", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("duration", sa.String(64), nullable=False),
        sa.Column("thumbnail", sa.String(1024), nullable=True),
        sa.ForeignKeyConstraint(["season_id"], ["seasons.id"], ondelete="CASCADE", name="fk_episodes_season_id_seasons"),
        sa.CheckConstraint("number >= 0", name="ck_episodes_number_nonneg"),
        sa.PrimaryKeyConstraint("id", name="pk_episodes"),
    )
    op.create_index("ix_episodes_season_number", "episodes", ["season_id", "number"])

    op.create_table(
        "video_sources",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("episode_id", sa.Integer(), nullable=False),
        sa.Column("quality", sa.String(32), nullable=False),
        sa.Column("url", sa.String(2048), nullable=False),
        sa.Column("is_downloadable", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.ForeignKeyConstraint(
            ["episode_id"], ["episodes.id"], ondelete="CASCADE", name="fk_video_sources_episode_id_episodes"
        ),
        sa.PrimaryKeyConstraint("id", name="pk_video_sources"),
    )
    op.create_index("ix_video_sources_episode_id", "video_sources", ["episode_id"])

    # --- Per-user library ---
    for table in ("watchlist", "favorites"):
        op.create_table(
            table,
            sa.Column("user_id", sa.Integer(), nullable=False),
            sa.Column("anime_id", sa.Integer(), nullable=False),
            _ts("added_at"),
            sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE", name=f"fk_{table}_user_id_users"),
            sa.ForeignKeyConstraint(["anime_id"], ["animes.id"], ondelete="CASCADE", name=f"fk_{table}_anime_id_animes"),
            sa.PrimaryKeyConstraint("user_id", "anime_id", name=f"pk_{table}"),
        )
        op.create_index(f"ix_{table}_anime_id", table, ["anime_id"])
        op.create_index(f"ix_{table}_user_added", table, ["user_id", "added_at"])

    op.create_table(
        "watch_progress",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("episode_id", sa.Integer(), nullable=False),
        sa.Column("progress", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("completed", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        _ts("updated_at"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE", name="fk_watch_progress_user_id_users"),
        sa.ForeignKeyConstraint(
            ["episode_id"], ["episodes.id"], ondelete="CASCADE", name="fk_watch_progress_episode_id_episodes"
        ),
        sa.CheckConstraint("progress >= 0", name="ck_watch_progress_progress_nonneg"),
        sa.PrimaryKeyConstraint("id", name="pk_watch_progress"),
        sa.UniqueConstraint("user_id", "episode_id", name="uq_watch_progress_user_episode"),
    )
    op.create_index("ix_watch_progress_episode_id", "watch_progress", ["episode_id"])

    op.create_table(
        "downloads",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("episode_id", sa.Integer(), nullable=False),
        sa.Column("quality", sa.String(32), nullable=False),
        sa.Column("ip_address", sa.String(64), nullable=True),
        sa.Column("completed", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        _ts("downloaded_at"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE", name="fk_downloads_user_id_users"),
        sa.ForeignKeyConstraint(
            ["episode_id"], ["episodes.id"], ondelete="CASCADE", name="fk_downloads_episode_id_episodes"
        ),
        sa.PrimaryKeyConstraint("id", name="pk_downloads"),
    )
    op.create_index("ix_downloads_episode_id", "downloads", ["episode_id"])
    op.create_index("ix_downloads_user_downloaded", "downloads", ["user_id", "downloaded_at"])


def downgrade() -> None:
    for table in (
        "downloads",
        "watch_progress",
        "favorites",
        "watchlist",
        "video_sources",
        "episodes",
        "seasons",
        "anime_genres",
        "animes",
        "genres",
        "user_sessions",
        "users",
    ):
        op.drop_table(table)

    bind = op.get_bind()
    for enum in (anime_status, anime_type, user_status, user_role):
        enum.drop(bind, checkfirst=True)
