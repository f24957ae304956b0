"""SQLAlchemy models for clientledger database."""

from datetime import datetime, date, UTC
from decimal import Decimal
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    Boolean,
    Index,
    create_engine,
    event,
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session
from sqlalchemy.types import TypeDecorator

Base = declarative_base()


class Money(TypeDecorator):
    """Exact decimal column.

    SQLite has no decimal storage class, so values are kept as text there
    instead of being squeezed through a REAL.
    """

    impl = Numeric(15, 2)
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "sqlite":
            return dialect.type_descriptor(String(32))
        return dialect.type_descriptor(Numeric(15, 2))

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if not isinstance(value, Decimal):
            raise TypeError(f"Money columns only accept Decimal, got {type(value).__name__}")
        if dialect.name == "sqlite":
            return str(value)
        return value

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return Decimal(str(value))


class Client(Base):
    """Customer or supplier model."""

    __tablename__ = "clients"

    id = Column(Integer, primary_key=True)
    name = Column(String, unique=True, nullable=False)
    client_type = Column(String, nullable=False, default="customer")
    balance = Column(Money, nullable=False, default=Decimal("0"))
    is_active = Column(Boolean, default=True, nullable=False)
    phone = Column(String, nullable=True)
    email = Column(String, nullable=True)
    address = Column(String, nullable=True)
    notes = Column(String, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)
    version = Column(Integer, nullable=False)

    # Every flushed UPDATE checks and bumps the version, so a stale write fails
    __mapper_args__ = {"version_id_col": version}

    # Relationships
    invoices = relationship("Invoice", back_populates="client")
    transactions = relationship("Transaction", back_populates="client")
    balance_history = relationship(
        "BalanceHistory",
        back_populates="client",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class Invoice(Base):
    """Sale or purchase invoice model."""

    __tablename__ = "invoices"

    id = Column(Integer, primary_key=True)
    invoice_number = Column(String, unique=True, nullable=False)
    invoice_type = Column(String, nullable=False)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False)
    date = Column(Date, nullable=False, default=date.today)
    total = Column(Money, nullable=False)
    paid = Column(Money, nullable=False, default=Decimal("0"))
    notes = Column(String, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    client = relationship("Client", back_populates="invoices")
    payments = relationship("Transaction", back_populates="invoice")


class Transaction(Base):
    """Treasury transaction model."""

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True)
    transaction_number = Column(String, unique=True, nullable=False)
    transaction_type = Column(String, nullable=False)
    amount = Column(Money, nullable=False)
    date = Column(Date, nullable=False, default=date.today)
    description = Column(String, nullable=False, default="")
    payment_method = Column(String, nullable=False, default="cash")
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=True)
    invoice_id = Column(Integer, ForeignKey("invoices.id"), nullable=True)
    reference_number = Column(String, nullable=True)
    notes = Column(String, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    client = relationship("Client", back_populates="transactions")
    invoice = relationship("Invoice", back_populates="payments")


class BalanceHistory(Base):
    """Append-only balance history model."""

    __tablename__ = "balance_history"

    id = Column(Integer, primary_key=True)
    client_id = Column(Integer, ForeignKey("clients.id", ondelete="CASCADE"), nullable=False)
    cause_type = Column(String, nullable=False)
    cause_id = Column(Integer, nullable=True)
    previous_balance = Column(Money, nullable=False)
    amount = Column(Money, nullable=False)
    new_balance = Column(Money, nullable=False)
    entry_type = Column(String, nullable=False)
    description = Column(String, nullable=True)
    date = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    __table_args__ = (
        Index("idx_balance_history_client", "client_id"),
        Index("idx_balance_history_date", "date"),
        Index("idx_balance_history_cause", "cause_type", "cause_id"),
    )

    # Relationships
    client = relationship("Client", back_populates="balance_history")


def _configure_sqlite(engine: Engine) -> None:
    """Enable foreign keys and take the write lock at BEGIN on SQLite.

    pysqlite's own transaction handling is switched off so that every
    transaction starts with ``BEGIN IMMEDIATE``; concurrent writers then queue
    on the database lock instead of failing at commit time.
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def create_database_engine(database_url: str, lock_timeout: float = 15.0) -> Engine:
    """Create an engine and make sure the schema exists.

    Args:
        database_url: SQLAlchemy database URL
        lock_timeout: Seconds to wait for a database lock before giving up
    """
    if database_url.startswith("sqlite"):
        engine = create_engine(database_url, echo=False, connect_args={"timeout": lock_timeout})
        _configure_sqlite(engine)
    else:
        engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return engine


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    return sessionmaker(bind=engine, expire_on_commit=False)
