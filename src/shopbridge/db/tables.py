from datetime import datetime, timezone

from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()

# SQLite only autoincrements INTEGER PRIMARY KEY columns.
Id = BigInteger().with_variant(Integer(), "sqlite")


class Client(Base):
    """
    A customer known by e-mail. email is the natural key used by
    get-or-create; phone is refreshed whenever a new value arrives.
    """

    __tablename__ = "clients"

    id = Column(Id, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False)
    email = Column(Text, nullable=False, unique=True)
    phone = Column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<Client id={self.id} email={self.email!r}>"


class Category(Base):
    __tablename__ = "categories"

    id = Column(Id, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False, unique=True)


class GarmentType(Base):
    """Classification used to label chat conversations (e.g. 'Camisa')."""

    __tablename__ = "garment_types"

    id = Column(Id, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False, unique=True)


class Color(Base):
    __tablename__ = "colors"

    id = Column(Id, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False)


class Size(Base):
    __tablename__ = "sizes"

    id = Column(Id, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False)


class Product(Base):
    """
    A catalog product. Price lives on the product, stock on its variants.

    Only rows with available = true are listed to shoppers.
    """

    __tablename__ = "products"

    id = Column(Id, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Numeric(12, 2), nullable=False)
    available = Column(Boolean, nullable=False, default=True)
    category_id = Column(Id, ForeignKey("categories.id"), nullable=True)
    garment_type_id = Column(Id, ForeignKey("garment_types.id"), nullable=True)

    __table_args__ = (CheckConstraint("price >= 0", name="ck_product_price"),)

    variants = relationship(
        "ProductVariant", back_populates="product", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<Product id={self.id} name={self.name!r}>"


class ProductVariant(Base):
    """
    A purchasable color/size combination of a product.

    stock is the available-to-sell count; there is no reservation column,
    carts never hold stock.
    """

    __tablename__ = "product_variants"

    id = Column(Id, primary_key=True, autoincrement=True)
    product_id = Column(
        Id, ForeignKey("products.id", ondelete="CASCADE"), nullable=False
    )
    color_id = Column(Id, ForeignKey("colors.id"), nullable=True)
    size_id = Column(Id, ForeignKey("sizes.id"), nullable=True)
    stock = Column(Integer, nullable=False, default=0)

    __table_args__ = (CheckConstraint("stock >= 0", name="ck_variant_stock"),)

    product = relationship("Product", back_populates="variants")

    def __repr__(self) -> str:
        return f"<ProductVariant id={self.id} stock={self.stock}>"


class Cart(Base):
    """
    A shopping cart. Anonymous carts have no client_id.

    public_id is the opaque (UUID) identifier handed to callers that
    created the cart without a client; numeric id works everywhere too.
    A client has at most one cart with status 'active', enforced
    by a partial unique index.
    """

    __tablename__ = "carts"

    id = Column(Id, primary_key=True, autoincrement=True)
    public_id = Column(Text, nullable=False, unique=True)
    client_id = Column(
        Id, ForeignKey("clients.id", ondelete="SET NULL"), nullable=True
    )
    status = Column(Text, nullable=False, default="active")
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        Index(
            "uq_cart_active_client",
            "client_id",
            unique=True,
            postgresql_where=text("status = 'active'"),
            sqlite_where=text("status = 'active'"),
        ),
    )

    items = relationship(
        "CartItem", back_populates="cart", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<Cart id={self.id} client_id={self.client_id} status={self.status!r}>"


class CartItem(Base):
    """
    A (cart, variant, qty) line. qty must be > 0 -- removing an item means
    deleting the row. One row per variant per cart.
    """

    __tablename__ = "cart_items"

    id = Column(Id, primary_key=True, autoincrement=True)
    cart_id = Column(
        Id, ForeignKey("carts.id", ondelete="CASCADE"), nullable=False
    )
    product_variant_id = Column(
        Id, ForeignKey("product_variants.id"), nullable=False
    )
    qty = Column(Integer, nullable=False)

    __table_args__ = (
        CheckConstraint("qty > 0", name="ck_cart_item_qty"),
        UniqueConstraint("cart_id", "product_variant_id", name="uq_cart_item_variant"),
    )

    cart = relationship("Cart", back_populates="items")

    def __repr__(self) -> str:
        return (
            f"<CartItem id={self.id} variant_id={self.product_variant_id} "
            f"qty={self.qty}>"
        )


def create_schema(engine: Engine) -> None:
    Base.metadata.create_all(engine)
