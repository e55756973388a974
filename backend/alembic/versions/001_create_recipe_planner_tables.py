"""Create users, recipes, meal_plans and shopping_lists tables

Revision ID: 001
Revises: None
Create Date: 2026-10-18 00:00:00.000000+00:00

What:  The initial schema: accounts and the three kinds of user-owned rows.
How:   Integer identity keys; every owned table references users.id with
       ON DELETE CASCADE and is indexed on user_id.

Rollback: downgrade() drops all four tables (destructive, all data lost).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column(
            "email",
            sa.String(255),
            nullable=False,
            comment="Login identifier, unique and case-sensitive",
        ),
        sa.Column("name", sa.String(100), nullable=True, comment="Display name"),
        sa.Column(
            "password_hash",
            sa.String(255),
            nullable=False,
            comment="bcrypt digest of the password (never the plaintext)",
        ),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        # Authoritative duplicate check: settles concurrent registrations
        sa.UniqueConstraint("email", name="uq_users_email"),
        # SQLite would otherwise hand a deleted user's id to the next signup
        sqlite_autoincrement=True,
    )

    op.create_table(
        "recipes",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column(
            "spoonacular_id",
            sa.Integer(),
            nullable=True,
            comment="Recipe id in the Spoonacular API",
        ),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("image_url", sa.String(1024), nullable=True),
        sa.Column(
            "ingredients",
            sa.JSON(),
            nullable=False,
            comment="Ingredient names as returned by the recipe API",
        ),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
    )
    op.create_index("idx_recipes_user_id", "recipes", ["user_id"])

    op.create_table(
        "meal_plans",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("recipe_id", sa.Integer(), nullable=False),
        sa.Column("day_of_week", sa.String(16), nullable=False, comment="Monday..Sunday"),
        sa.Column(
            "meal_type",
            sa.String(32),
            nullable=False,
            comment="breakfast, lunch, dinner or snack",
        ),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["recipe_id"], ["recipes.id"], ondelete="CASCADE"),
    )
    op.create_index("idx_meal_plans_user_id", "meal_plans", ["user_id"])

    op.create_table(
        "shopping_lists",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("ingredient", sa.String(255), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
    )
    op.create_index("idx_shopping_lists_user_id", "shopping_lists", ["user_id"])


def downgrade() -> None:
    """Drop everything, children first."""
    op.drop_index("idx_shopping_lists_user_id", table_name="shopping_lists")
    op.drop_table("shopping_lists")
    op.drop_index("idx_meal_plans_user_id", table_name="meal_plans")
    op.drop_table("meal_plans")
    op.drop_index("idx_recipes_user_id", table_name="recipes")
    op.drop_table("recipes")
    op.drop_table("users")
