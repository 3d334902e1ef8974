from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
    Text,
)

metadata = MetaData()

# Read-only to the engine: owned by the fleet catalogue.
cars = Table(
    "cars",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(255), nullable=False, default=""),
    Column("price", Numeric(12, 2), nullable=False),
    Column("discount_price", Numeric(12, 2)),
    Column("insurance_amount", Numeric(12, 2), nullable=False, default=0),
    Column("status", String(20), nullable=False, default="available"),
    Column("parking_id", Integer),
)

coupons = Table(
    "coupons",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("code", String(50), nullable=False, unique=True),
    Column("name", String(255), nullable=False, default=""),
    Column("discount_type", String(20), nullable=False),
    Column("discount_amount", Numeric(12, 2), nullable=False),
    Column("min_booking_amount", Numeric(12, 2), nullable=False, default=0),
    Column("max_discount_amount", Numeric(12, 2)),
    Column("start_date", DateTime(timezone=True)),
    Column("end_date", DateTime(timezone=True)),
    Column("usage_limit", Integer),
    Column("usage_count", Integer, nullable=False, default=0),
    Column("per_user_limit", Integer, nullable=False, default=1),
    Column("status", String(20), nullable=False, default="active"),
    Column("is_active", Boolean, nullable=False, default=True),
)

topups = Table(
    "topups",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(255), nullable=False),
    Column("duration_hours", Integer, nullable=False),
    Column("price", Numeric(12, 2), nullable=False),
    Column("category", String(50), nullable=False, default="extension"),
    Column("is_active", Boolean, nullable=False, default=True),
)

bookings = Table(
    "bookings",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", Integer, nullable=False),
    Column("car_id", Integer, ForeignKey("cars.id"), nullable=False),
    Column("pickup_parking_id", Integer),
    Column("dropoff_parking_id", Integer),
    Column("coupon_id", Integer, ForeignKey("coupons.id")),
    Column("start_date", DateTime(timezone=True), nullable=False),
    Column("end_date", DateTime(timezone=True), nullable=False),
    Column("pickup_date", DateTime(timezone=True)),
    Column("actual_pickup_date", DateTime(timezone=True)),
    Column("actual_dropoff_date", DateTime(timezone=True)),
    Column("original_pickup_date", DateTime(timezone=True)),
    Column("reschedule_count", Integer, nullable=False, default=0),
    Column("max_reschedule_count", Integer, nullable=False, default=3),
    Column("base_price", Numeric(12, 2), nullable=False),
    Column("insurance_amount", Numeric(12, 2), nullable=False, default=0),
    Column("delivery_charges", Numeric(12, 2), nullable=False, default=0),
    Column("discount_amount", Numeric(12, 2), nullable=False, default=0),
    Column("total_price", Numeric(12, 2), nullable=False),
    Column("advance_amount", Numeric(12, 2), nullable=False),
    Column("remaining_amount", Numeric(12, 2), nullable=False),
    Column("extension_price", Numeric(12, 2), nullable=False, default=0),
    Column("extension_till", DateTime(timezone=True)),
    Column("extension_hours", Integer, nullable=False, default=0),
    Column("status", String(20), nullable=False, default="pending"),
    Column("confirmation_status", String(20), nullable=False, default="pending"),
    Column("advance_payment_status", String(20), nullable=False, default="pending"),
    Column("advance_payment_reference", String(128)),
    Column("final_payment_status", String(20), nullable=False, default="pending"),
    Column("final_payment_reference", String(128)),
    Column("pic_approved", Boolean, nullable=False, default=False),
    Column("pic_approved_at", DateTime(timezone=True)),
    Column("pic_approved_by", Integer),
    Column("pic_comments", Text),
    Column("user_confirmed", Boolean, nullable=False, default=False),
    Column("user_confirmed_at", DateTime(timezone=True)),
    Column("otp_code", String(4)),
    Column("otp_expires_at", DateTime(timezone=True)),
    Column("otp_verified", Boolean, nullable=False, default=False),
    Column("otp_verified_at", DateTime(timezone=True)),
    Column("otp_verified_by", Integer),
    Column("delivery_type", String(20), nullable=False, default="pickup"),
    Column("delivery_address", Text),
    Column("car_condition_images", JSON, nullable=False),
    Column("tool_images", JSON, nullable=False),
    Column("tools", JSON, nullable=False),
    Column("return_condition", String(50)),
    Column("return_images", JSON, nullable=False),
    Column("return_comments", Text),
    Column("lock_version", Integer, nullable=False, default=0),
    Column("created_at", DateTime(timezone=True)),
    Column("updated_at", DateTime(timezone=True)),
    Index("ix_bookings_car_window", "car_id", "status", "start_date", "end_date"),
)

booking_topups = Table(
    "booking_topups",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("booking_id", Integer, ForeignKey("bookings.id"), nullable=False, index=True),
    Column("topup_id", Integer, ForeignKey("topups.id"), nullable=False),
    Column("applied_at", DateTime(timezone=True)),
    Column("original_end_date", DateTime(timezone=True), nullable=False),
    Column("new_end_date", DateTime(timezone=True), nullable=False),
    Column("amount", Numeric(12, 2), nullable=False),
    Column("payment_status", String(20), nullable=False, default="pending"),
    Column("payment_reference", String(128)),
    Column("created_at", DateTime(timezone=True)),
)

pic_verifications = Table(
    "pic_verifications",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("car_id", Integer, ForeignKey("cars.id"), nullable=False),
    Column("parking_id", Integer, nullable=False),
    Column("pic_id", Integer, nullable=False),
    Column("booking_id", Integer, ForeignKey("bookings.id"), nullable=False),
    Column("verification_type", String(20), nullable=False),
    Column("status", String(20), nullable=False, default="pending"),
    Column("engine_condition", String(20)),
    Column("body_condition", String(20)),
    Column("interior_condition", String(20)),
    Column("tire_condition", String(20)),
    Column("rc_verified", Boolean, nullable=False, default=False),
    Column("insurance_verified", Boolean, nullable=False, default=False),
    Column("pollution_verified", Boolean, nullable=False, default=False),
    Column("verification_images", JSON, nullable=False),
    Column("pic_comments", Text),
    Column("vendor_feedback", Text),
    Column("verified_at", DateTime(timezone=True)),
    Column("lock_version", Integer, nullable=False, default=0),
    Column("created_at", DateTime(timezone=True)),
    Column("updated_at", DateTime(timezone=True)),
    Index("ix_pic_verifications_lookup", "car_id", "verification_type", "booking_id"),
)

payments = Table(
    "payments",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("booking_id", Integer, ForeignKey("bookings.id"), nullable=False, index=True),
    Column("milestone", String(20), nullable=False),
    Column("status", String(20), nullable=False),
    Column("amount", Numeric(12, 2), nullable=False),
    Column("reference_id", String(128)),
    Column("booking_topup_id", Integer, ForeignKey("booking_topups.id")),
    Column("created_at", DateTime(timezone=True)),
)

idempotency_keys = Table(
    "idempotency_keys",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("scope", String(32), nullable=False),
    Column("idem_key", String(128), nullable=False),
    Column("request_hash", String(64), nullable=False),
    Column("response_json", JSON),
    Column("http_status", Integer),
    Column("reference_booking_id", Integer),
    Index("ux_idempotency_scope_key", "scope", "idem_key", unique=True),
)
