"""init

Revision ID: 0001_init
Revises: 
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa

revision = "0001_init"
down_revision = None
branch_labels = None
depends_on = None

def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()")),
    ]

def upgrade():
    op.create_table(
        "user",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(length=256), nullable=False),
        sa.Column("password_hash", sa.String(length=256), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        *_timestamps(),
    )
    op.create_index("ix_user_email", "user", ["email"], unique=True)

    op.create_table(
        "profile",
        sa.Column("id", sa.Integer(), sa.ForeignKey("user.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("full_name", sa.String(length=256), nullable=True),
        sa.Column("username", sa.String(length=64), nullable=True, unique=True),
        sa.Column("role", sa.String(length=32), nullable=False, server_default="mechanic"),
        *_timestamps(),
    )

    op.create_table(
        "checklist",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("mechanic_id", sa.Integer(), sa.ForeignKey("user.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("customer_name", sa.String(length=256), nullable=False),
        sa.Column("plate", sa.String(length=16), nullable=False),
        sa.Column("vehicle_name", sa.String(length=256), nullable=False),
        sa.Column("priority", sa.String(length=16), nullable=False, server_default="medium"),
        sa.Column("general_observations", sa.Text(), nullable=True),
        sa.Column("video_url", sa.String(length=1024), nullable=True),
        sa.Column("status", sa.String(length=32), nullable=False, server_default="in_progress"),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("(status = 'completed') = (completed_at is not null)", name="ck_checklist_completed_at"),
    )
    op.create_index("ix_checklist_mechanic_id", "checklist", ["mechanic_id"])
    op.create_index("ix_checklist_plate", "checklist", ["plate"])
    op.create_index("ix_checklist_status", "checklist", ["status"])

    op.create_table(
        "checklist_item",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("checklist_id", sa.Integer(), sa.ForeignKey("checklist.id", ondelete="CASCADE"), nullable=False),
        sa.Column("item_name", sa.String(length=256), nullable=False),
        sa.Column("category", sa.String(length=128), nullable=False),
        sa.Column("checked", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("observation", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_checklist_item_checklist_id", "checklist_item", ["checklist_id"])

    op.create_table(
        "budget",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("budget_number", sa.String(length=32), nullable=True, unique=True),
        sa.Column("mechanic_id", sa.Integer(), sa.ForeignKey("user.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("customer_name", sa.String(length=256), nullable=False),
        sa.Column("vehicle_name", sa.String(length=256), nullable=False),
        sa.Column("vehicle_plate", sa.String(length=16), nullable=True),
        sa.Column("vehicle_year", sa.Integer(), nullable=True),
        sa.Column("observations", sa.Text(), nullable=True),
        sa.Column("total_amount", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("discount_amount", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("final_amount", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("status", sa.String(length=32), nullable=False, server_default="pending"),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("(status = 'approved') = (completed_at is not null)", name="ck_budget_completed_at"),
        sa.CheckConstraint("discount_amount >= 0", name="ck_budget_discount"),
    )
    op.create_index("ix_budget_mechanic_id", "budget", ["mechanic_id"])
    op.create_index("ix_budget_status", "budget", ["status"])

    op.create_table(
        "budget_item",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("budget_id", sa.Integer(), sa.ForeignKey("budget.id", ondelete="CASCADE"), nullable=False),
        sa.Column("service_name", sa.String(length=256), nullable=False),
        sa.Column("service_category", sa.String(length=128), nullable=True),
        sa.Column("quantity", sa.Numeric(12, 3), nullable=False, server_default="1"),
        sa.Column("unit_price", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("total_price", sa.Numeric(12, 2), nullable=False, server_default="0"),
        *_timestamps(),
        sa.CheckConstraint("quantity > 0 and unit_price >= 0", name="ck_budget_item_amounts"),
    )
    op.create_index("ix_budget_item_budget_id", "budget_item", ["budget_id"])

    op.create_table(
        "public_link",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("token", sa.String(length=128), nullable=False),
        sa.Column("resource_type", sa.String(length=16), nullable=False),
        sa.Column("resource_id", sa.Integer(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_by", sa.Integer(), sa.ForeignKey("user.id", ondelete="SET NULL"), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()")),
        sa.Column("deactivated_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("resource_type in ('checklist', 'budget')", name="ck_public_link_type"),
    )
    op.create_index("ix_public_link_token", "public_link", ["token"], unique=True)
    op.create_index(
        "uq_public_link_active_resource",
        "public_link",
        ["resource_type", "resource_id"],
        unique=True,
        postgresql_where=sa.text("is_active"),
    )

    if op.get_bind().dialect.name == "postgresql":
        _enable_row_level_security()

LINK_TARGET_OWNED = """(
    app_is_admin()
    or exists (
        select 1 from checklist c
        where public_link.resource_type = 'checklist' and c.id = public_link.resource_id
          and c.mechanic_id = app_user_id()
    )
    or exists (
        select 1 from budget b
        where public_link.resource_type = 'budget' and b.id = public_link.resource_id
          and b.mechanic_id = app_user_id()
    )
)"""

def _enable_row_level_security():
    # settings are bound per transaction by workshop.db.rls
    op.execute("""
        create or replace function app_user_id() returns integer language sql stable as
        $$ select nullif(current_setting('app.user_id', true), '')::integer $$;
        create or replace function app_is_admin() returns boolean language sql stable as
        $$ select coalesce(current_setting('app.user_role', true), '') = 'admin' $$;
        create or replace function app_public_token() returns text language sql stable as
        $$ select nullif(current_setting('app.public_token', true), '') $$;
    """)

    for table in ("checklist", "budget"):
        op.execute(f"alter table {table} enable row level security")
        op.execute(f"alter table {table} force row level security")
        owner = "(app_is_admin() or mechanic_id = app_user_id())"
        op.execute(f"create policy {table}_staff_read on {table} for select using {owner}")
        op.execute(f"create policy {table}_staff_insert on {table} for insert with check {owner}")
        op.execute(f"create policy {table}_staff_update on {table} for update using {owner} with check {owner}")
        # mechanics never delete
        op.execute(f"create policy {table}_admin_delete on {table} for delete using (app_is_admin())")
        op.execute(f"""
            create policy {table}_public on {table} for select
            using (exists (
                select 1 from public_link pl
                where pl.resource_type = '{table}' and pl.resource_id = {table}.id
                  and pl.is_active and pl.token = app_public_token()
            ))
        """)

    # items follow the visibility of their parent row
    for table, parent, fk in (("checklist_item", "checklist", "checklist_id"), ("budget_item", "budget", "budget_id")):
        op.execute(f"alter table {table} enable row level security")
        op.execute(f"alter table {table} force row level security")
        op.execute(f"""
            create policy {table}_parent on {table} for all
            using (exists (select 1 from {parent} p where p.id = {table}.{fk}))
            with check (exists (select 1 from {parent} p where p.id = {table}.{fk}))
        """)

    # link rows are readable (lookup by token); writes need the target to be the caller's
    op.execute("alter table public_link enable row level security")
    op.execute("alter table public_link force row level security")
    op.execute("create policy public_link_read on public_link for select using (true)")
    op.execute(f"create policy public_link_write on public_link for insert with check {LINK_TARGET_OWNED}")
    op.execute(
        f"create policy public_link_update on public_link for update "
        f"using {LINK_TARGET_OWNED} with check {LINK_TARGET_OWNED}"
    )

def downgrade():
    op.drop_table("public_link")
    op.drop_table("budget_item")
    op.drop_table("budget")
    op.drop_table("checklist_item")
    op.drop_table("checklist")
    op.drop_table("profile")
    op.drop_table("user")
    if op.get_bind().dialect.name == "postgresql":
        op.execute("drop function if exists app_user_id(); drop function if exists app_is_admin(); drop function if exists app_public_token();")
