"""Buying desk schema: catalog, contacts, events, sessions, cart and purchases

Revision ID: 20261016_buying_desk
Revises:
Create Date: 2026-10-16
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20261016_buying_desk"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=False),
    ]


def upgrade():
    op.create_table(
        "global_assets",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("type", sa.String(32), nullable=False, server_default="graded"),
        sa.Column("grader", sa.String(32), nullable=True),
        sa.Column("cert_number", sa.String(64), nullable=True),
        sa.Column("card_id", sa.String(128), nullable=True),
        sa.Column("title", sa.Text(), nullable=True),
        sa.Column("player_name", sa.String(255), nullable=True),
        sa.Column("set_name", sa.String(255), nullable=True),
        sa.Column("year", sa.String(16), nullable=True),
        sa.Column("card_number", sa.String(64), nullable=True),
        sa.Column("variant", sa.String(255), nullable=True),
        sa.Column("grade", sa.String(32), nullable=True),
        sa.Column("category", sa.String(64), nullable=True),
        sa.Column("psa_image_front_url", sa.Text(), nullable=True),
        sa.Column("psa_image_back_url", sa.Text(), nullable=True),
        sa.Column("last_pricing_update", sa.DateTime(timezone=True), nullable=True),
        sa.Column("sales_refresh_requested_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )

    with op.batch_alter_table("global_assets", schema=None) as batch_op:
        batch_op.create_index("ix_global_assets_cert_number", ["cert_number"], unique=False)
        batch_op.create_index("ix_global_assets_card_id", ["card_id"], unique=False)

    op.create_table(
        "card_sales",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("card_id", sa.String(128), nullable=False),
        sa.Column("global_asset_id", sa.String(36), nullable=True),
        sa.Column("title", sa.Text(), nullable=True),
        sa.Column("sold_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("shipping", sa.Numeric(10, 2), nullable=False, server_default=sa.text("0")),
        sa.Column("verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("source", sa.String(32), nullable=True),
        sa.Column("sold_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=False),
        sa.ForeignKeyConstraint(["global_asset_id"], ["global_assets.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )

    with op.batch_alter_table("card_sales", schema=None) as batch_op:
        batch_op.create_index("ix_card_sales_card_sold", ["card_id", "sold_at"], unique=False)

    op.create_table(
        "user_assets",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("global_asset_id", sa.String(36), nullable=False),
        sa.Column("personal_value", sa.Numeric(10, 2), nullable=True),
        sa.Column("purchase_price", sa.Numeric(10, 2), nullable=True),
        sa.Column("market_price_at_purchase", sa.Numeric(10, 2), nullable=True),
        sa.Column("purchase_date", sa.Date(), nullable=True),
        sa.Column("purchase_source", sa.String(64), nullable=True),
        sa.Column("buy_offer_id", sa.String(36), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("ownership_status", sa.String(16), nullable=False, server_default="own"),
        sa.Column("status", sa.String(16), nullable=False, server_default="Draft"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("added_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=False),
        sa.ForeignKeyConstraint(["global_asset_id"], ["global_assets.id"]),
        sa.PrimaryKeyConstraint("id"),
    )

    with op.batch_alter_table("user_assets", schema=None) as batch_op:
        batch_op.create_index("ix_user_assets_user_id", ["user_id"], unique=False)
        batch_op.create_index("ix_user_assets_user_global", ["user_id", "global_asset_id"], unique=False)

    op.create_table(
        "events",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("date_start", sa.Date(), nullable=False),
        sa.Column("date_end", sa.Date(), nullable=True),
        sa.Column("location", sa.Text(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("status", sa.String(32), nullable=False, server_default="upcoming"),
        sa.Column("archived", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )

    with op.batch_alter_table("events", schema=None) as batch_op:
        batch_op.create_index("ix_events_user_id", ["user_id"], unique=False)
        batch_op.create_index("ix_events_user_name", ["user_id", "name"], unique=False)

    op.create_table(
        "contacts",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(64), nullable=True),
        sa.Column("company_name", sa.String(255), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("source", sa.String(32), nullable=False, server_default="manual"),
        sa.Column("archived", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )

    with op.batch_alter_table("contacts", schema=None) as batch_op:
        batch_op.create_index("ix_contacts_user_id", ["user_id"], unique=False)
        batch_op.create_index("ix_contacts_user_email", ["user_id", "email"], unique=False)

    op.create_table(
        "sellers",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("contact_id", sa.String(36), nullable=False),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.ForeignKeyConstraint(["contact_id"], ["contacts.id"]),
        sa.PrimaryKeyConstraint("id"),
    )

    with op.batch_alter_table("sellers", schema=None) as batch_op:
        batch_op.create_index("ix_sellers_user_id", ["user_id"], unique=False)
        batch_op.create_index("ix_sellers_user_contact", ["user_id", "contact_id"], unique=False)

    op.create_table(
        "buy_offers",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("offer_number", sa.String(32), nullable=False),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("seller_id", sa.String(36), nullable=True),
        sa.Column("event_id", sa.String(36), nullable=True),
        sa.Column("status", sa.String(16), nullable=False, server_default="active"),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("archived", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
        sa.Column("sent_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["seller_id"], ["sellers.id"]),
        sa.ForeignKeyConstraint(["event_id"], ["events.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("offer_number", name="uq_buy_offers_offer_number"),
    )

    with op.batch_alter_table("buy_offers", schema=None) as batch_op:
        batch_op.create_index("ix_buy_offers_user_id", ["user_id"], unique=False)
        batch_op.create_index("ix_buy_offers_event_id", ["event_id"], unique=False)
        batch_op.create_index("ix_buy_offers_user_created", ["user_id", "created_at"], unique=False)
        batch_op.create_index("ix_buy_offers_user_archived", ["user_id", "archived"], unique=False)

    op.create_table(
        "buy_offer_evaluation_assets",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("buy_offer_id", sa.String(36), nullable=False),
        sa.Column("asset_id", sa.String(36), nullable=False),
        sa.Column("evaluation_notes", sa.Text(), nullable=True),
        sa.Column("added_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=False),
        sa.ForeignKeyConstraint(["buy_offer_id"], ["buy_offers.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["asset_id"], ["global_assets.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )

    with op.batch_alter_table("buy_offer_evaluation_assets", schema=None) as batch_op:
        batch_op.create_index("ix_eval_assets_session_asset", ["buy_offer_id", "asset_id"], unique=False)

    op.create_table(
        "buy_offer_assets",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("buy_offer_id", sa.String(36), nullable=False),
        sa.Column("asset_id", sa.String(36), nullable=False),
        sa.Column("offer_price", sa.Numeric(10, 2), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("market_value_at_offer", sa.Numeric(10, 2), nullable=True),
        sa.Column("expected_profit", sa.Numeric(10, 2), nullable=True),
        sa.Column("added_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=False),
        sa.ForeignKeyConstraint(["buy_offer_id"], ["buy_offers.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["asset_id"], ["global_assets.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )

    with op.batch_alter_table("buy_offer_assets", schema=None) as batch_op:
        batch_op.create_index("ix_cart_entries_session_asset", ["buy_offer_id", "asset_id"], unique=False)

    op.create_table(
        "purchase_transactions",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("event_id", sa.String(36), nullable=True),
        sa.Column("buy_offer_id", sa.String(36), nullable=True),
        sa.Column("global_asset_id", sa.String(36), nullable=False),
        sa.Column("user_asset_id", sa.String(36), nullable=True),
        sa.Column("purchase_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("payment_method", sa.String(16), nullable=False),
        sa.Column("seller_name", sa.String(255), nullable=True),
        sa.Column("seller_contact_id", sa.String(36), nullable=True),
        sa.Column("market_price_at_purchase", sa.Numeric(10, 2), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("purchase_date", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=False),
        sa.ForeignKeyConstraint(["event_id"], ["events.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["buy_offer_id"], ["buy_offers.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["global_asset_id"], ["global_assets.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_asset_id"], ["user_assets.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["seller_contact_id"], ["contacts.id"]),
        sa.PrimaryKeyConstraint("id"),
    )

    with op.batch_alter_table("purchase_transactions", schema=None) as batch_op:
        batch_op.create_index("ix_purchase_transactions_user_id", ["user_id"], unique=False)
        batch_op.create_index("ix_purchase_txns_user_asset", ["user_id", "global_asset_id"], unique=False)
        batch_op.create_index("ix_purchase_txns_session", ["buy_offer_id"], unique=False)


def downgrade():
    for table in (
        "purchase_transactions",
        "buy_offer_assets",
        "buy_offer_evaluation_assets",
        "buy_offers",
        "sellers",
        "contacts",
        "events",
        "user_assets",
        "card_sales",
        "global_assets",
    ):
        op.drop_table(table)
