"""SQLAlchemy models for retailmetrics database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


def _utcnow() -> datetime:
    # DateTime columns hold naive UTC values
    return datetime.now(UTC).replace(tzinfo=None)


class Category(Base):
    """Category shared by products and operating expenses."""

    __tablename__ = "categories"

    id = Column(Integer, primary_key=True)
    name = Column(String, unique=True, nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    # Relationships
    products = relationship("Product", back_populates="category")
    expenses = relationship("Expense", back_populates="category")


class Product(Base):
    """Inventory product model."""

    __tablename__ = "products"
    # Deleted ids stay retired so old sale items never attach to a new product
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    purchase_price = Column(Numeric(10, 2), nullable=True)
    stock = Column(Integer, default=0, nullable=False)
    min_stock = Column(Integer, default=0, nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True)
    barcode = Column(String, nullable=True)
    expiry_date = Column(Date, nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    # Relationships
    category = relationship("Category", back_populates="products")
    sale_items = relationship("SaleItem", back_populates="product", passive_deletes="all")


class Sale(Base):
    """Completed checkout."""

    __tablename__ = "sales"

    id = Column(Integer, primary_key=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False, index=True)
    total = Column(Numeric(12, 2), nullable=False)
    tax = Column(Numeric(12, 2), default=0, nullable=False)
    payment_method = Column(String, nullable=False)

    # Relationships
    items = relationship("SaleItem", back_populates="sale", cascade="all, delete-orphan")


class SaleItem(Base):
    """Sale line item."""

    __tablename__ = "sale_items"

    id = Column(Integer, primary_key=True)
    sale_id = Column(Integer, ForeignKey("sales.id"), nullable=False)
    # Not enforced by SQLite, so deleted products leave the id behind
    product_id = Column(Integer, ForeignKey("products.id"), nullable=True)
    quantity = Column(Integer, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    discount = Column(Numeric(5, 2), default=0, nullable=False)

    # Relationships
    sale = relationship("Sale", back_populates="items")
    product = relationship("Product", back_populates="sale_items")


class Expense(Base):
    """Operating expense model."""

    __tablename__ = "expenses"

    id = Column(Integer, primary_key=True)
    amount = Column(Numeric(12, 2), nullable=False)
    description = Column(String, nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True)
    payment_date = Column(Date, nullable=False, index=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    # Relationships
    category = relationship("Category", back_populates="expenses")


class InitialInvestment(Base):
    """Capital invested in the business."""

    __tablename__ = "initial_investments"

    id = Column(Integer, primary_key=True)
    amount = Column(Numeric(12, 2), nullable=False)
    description = Column(String, nullable=True)
    investment_date = Column(Date, nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)


class Setting(Base):
    """Global settings row."""

    __tablename__ = "settings"

    id = Column(Integer, primary_key=True)
    type = Column(String, unique=True, nullable=False, default="global")
    currency = Column(String, nullable=False, default="USD")


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
