"""Boards and lesson plans with RLS policies.

Revision ID: 001
Revises:
Create Date: 2026-10-19
"""

from alembic import op


# revision identifiers, used by Alembic.
revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # Boards: one row per design board, the whole document in `content`
    op.execute("""
        CREATE TABLE boards (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            user_id TEXT NOT NULL,
            title TEXT NOT NULL DEFAULT 'Untitled Board',
            slug TEXT UNIQUE NOT NULL,
            content JSONB NOT NULL DEFAULT '{}'::jsonb,
            subjects JSONB,
            state TEXT,
            grade_level TEXT,
            location TEXT,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
        );
    """)
    op.execute("CREATE INDEX idx_boards_user_updated ON boards (user_id, updated_at DESC)")

    # Lesson plans: one per (agenda entry, subject), deleted with their board
    op.execute("""
        CREATE TABLE lesson_plans (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            board_id UUID NOT NULL REFERENCES boards(id) ON DELETE CASCADE,
            agenda_entry_id TEXT NOT NULL,
            subject TEXT NOT NULL,
            period_minutes INTEGER NOT NULL CHECK (period_minutes > 0),
            content JSONB NOT NULL DEFAULT '{}'::jsonb,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
        );
    """)
    op.execute("CREATE INDEX idx_lesson_plans_board ON lesson_plans (board_id, agenda_entry_id, subject)")

    # RLS: an empty app.user_id is a system connection and sees everything
    op.execute("ALTER TABLE boards ENABLE ROW LEVEL SECURITY")
    op.execute("ALTER TABLE boards FORCE ROW LEVEL SECURITY")
    op.execute("""
        CREATE POLICY boards_all_own ON boards
        FOR ALL
        USING (
            NULLIF(current_setting('app.user_id', true), '') IS NULL OR
            user_id = current_setting('app.user_id', true)
        );
    """)

    op.execute("ALTER TABLE lesson_plans ENABLE ROW LEVEL SECURITY")
    op.execute("ALTER TABLE lesson_plans FORCE ROW LEVEL SECURITY")
    op.execute("""
        CREATE POLICY lesson_plans_all_own ON lesson_plans
        FOR ALL
        USING (
            NULLIF(current_setting('app.user_id', true), '') IS NULL OR
            board_id IN (SELECT id FROM boards WHERE user_id = current_setting('app.user_id', true))
        );
    """)


def downgrade():
    op.execute("DROP TABLE IF EXISTS lesson_plans")
    op.execute("DROP TABLE IF EXISTS boards")
