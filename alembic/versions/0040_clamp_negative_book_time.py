"""Clamp negative playback positions to zero.

Older player versions could persist a negative ``time`` when seeking
backwards past the start of a file.

Revision ID: 0040
Revises: 0039
Create Date: 2018-05-02 19:40:00
"""

from __future__ import annotations

from alembic import op

revision = "0040"
down_revision = "0039"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.execute("UPDATE books SET time = 0 WHERE time < 0")


def downgrade() -> None:
    # the original negative values are gone
    pass
