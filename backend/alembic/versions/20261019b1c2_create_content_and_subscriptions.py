"""Create authored content and user subscription tables.

Revision ID: 20261019b1c2
Revises: 20261019a1b2
Create Date: 2026-10-19 00:10:00.000000
"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20261019b1c2"
down_revision = "20261019a1b2"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "tutor_scripts",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("tone", sa.String(length=50), nullable=False),
        sa.Column("script", sa.Text(), nullable=False),
        sa.Column("grade", sa.String(length=50), nullable=False),
        sa.Column("subject", sa.String(length=50), nullable=False),
        sa.Column("topic", sa.String(length=200), nullable=False),
        sa.Column("duration_minutes", sa.Integer(), nullable=True),
        sa.Column("voice_settings", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_tutor_scripts_tone", "tutor_scripts", ["tone"])
    op.create_index("ix_tutor_scripts_grade", "tutor_scripts", ["grade"])
    op.create_index("ix_tutor_scripts_subject", "tutor_scripts", ["subject"])

    op.create_table(
        "coding_problems",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("difficulty", sa.String(length=20), nullable=False),
        sa.Column("language", sa.String(length=30), nullable=False),
        sa.Column("starter_code", sa.Text(), nullable=True),
        sa.Column("solution", sa.Text(), nullable=True),
        sa.Column("test_cases", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_coding_problems_difficulty", "coding_problems", ["difficulty"])
    op.create_index("ix_coding_problems_language", "coding_problems", ["language"])

    op.create_table(
        "ar_problems",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("subject", sa.String(length=50), nullable=False),
        sa.Column("grade", sa.String(length=50), nullable=False),
        sa.Column("difficulty", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("ar_data", sa.JSON(), nullable=True),
        sa.Column("answer", sa.Text(), nullable=True),
        sa.Column("hints", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_ar_problems_subject", "ar_problems", ["subject"])
    op.create_index("ix_ar_problems_grade", "ar_problems", ["grade"])

    op.create_table(
        "stories",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("language", sa.String(length=10), nullable=False, server_default="en"),
        sa.Column("grade_level", sa.String(length=50), nullable=True),
        sa.Column("subject", sa.String(length=50), nullable=True),
        sa.Column("audio_url", sa.String(length=500), nullable=True),
        sa.Column("images", sa.JSON(), nullable=True),
        sa.Column("is_premium", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_stories_language", "stories", ["language"])
    op.create_index("ix_stories_grade_level", "stories", ["grade_level"])

    op.create_table(
        "voice_quizzes",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("question", sa.Text(), nullable=False),
        sa.Column("answer", sa.Text(), nullable=False),
        sa.Column("alternative_answers", sa.JSON(), nullable=True),
        sa.Column("hint", sa.Text(), nullable=True),
        sa.Column("language", sa.String(length=10), nullable=False, server_default="en"),
        sa.Column("difficulty", sa.String(length=20), nullable=False, server_default="medium"),
        sa.Column("grade_level", sa.String(length=50), nullable=True),
        sa.Column("subject", sa.String(length=50), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_voice_quizzes_language", "voice_quizzes", ["language"])
    op.create_index("ix_voice_quizzes_difficulty", "voice_quizzes", ["difficulty"])
    op.create_index("ix_voice_quizzes_subject", "voice_quizzes", ["subject"])

    op.create_table(
        "user_subscriptions",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.String(length=255), nullable=False),
        sa.Column("subscription_id", sa.String(length=64), nullable=False, unique=True),
        sa.Column("plan_id", sa.String(length=64), nullable=False),
        sa.Column("status", sa.String(length=30), nullable=False, server_default="APPROVAL_PENDING"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_user_subscriptions_user_id", "user_subscriptions", ["user_id"])
    op.create_index("ix_user_subscriptions_user_created", "user_subscriptions", ["user_id", "created_at"])


def downgrade() -> None:
    op.drop_index("ix_user_subscriptions_user_created", table_name="user_subscriptions")
    op.drop_index("ix_user_subscriptions_user_id", table_name="user_subscriptions")
    op.drop_table("user_subscriptions")
    op.drop_index("ix_voice_quizzes_subject", table_name="voice_quizzes")
    op.drop_index("ix_voice_quizzes_difficulty", table_name="voice_quizzes")
    op.drop_index("ix_voice_quizzes_language", table_name="voice_quizzes")
    op.drop_table("voice_quizzes")
    op.drop_index("ix_stories_grade_level", table_name="stories")
    op.drop_index("ix_stories_language", table_name="stories")
    op.drop_table("stories")
    op.drop_index("ix_ar_problems_grade", table_name="ar_problems")
    op.drop_index("ix_ar_problems_subject", table_name="ar_problems")
    op.drop_table("ar_problems")
    op.drop_index("ix_coding_problems_language", table_name="coding_problems")
    op.drop_index("ix_coding_problems_difficulty", table_name="coding_problems")
    op.drop_table("coding_problems")
    op.drop_index("ix_tutor_scripts_subject", table_name="tutor_scripts")
    op.drop_index("ix_tutor_scripts_grade", table_name="tutor_scripts")
    op.drop_index("ix_tutor_scripts_tone", table_name="tutor_scripts")
    op.drop_table("tutor_scripts")
