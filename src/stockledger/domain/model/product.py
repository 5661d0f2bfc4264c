"""Product aggregate — the stock record for one catalog item.

``current_stock`` is the only externally trusted mutable quantity and it
changes exclusively through ``apply_movement()``.  Every call is paired
with exactly one ledger entry by the stock movement service, which keeps
the record reconcilable against the ledger.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from stockledger.domain.exceptions import InsufficientStockError, ValidationError
from stockledger.domain.model.value_objects import Money, to_quantity

UNITS = ("piece", "kg", "gram", "liter", "ml", "meter", "cm", "box", "pack")

DEFAULT_MIN_STOCK_LEVEL = Decimal("10")
DEFAULT_MAX_STOCK_LEVEL = Decimal("1000")
MAX_NAME_LENGTH = 100


@dataclass
class Product:
    """Aggregate root for a product and its on-hand quantity.

    Invariants:
    - ``current_stock`` is never negative
    - ``current_stock`` equals the signed sum of this product's ledger entries

    ``version`` is owned by the storage layer and used for optimistic
    concurrency checks; the domain never touches it.
    """

    id: str
    name: str
    cost_price: Money
    selling_price: Money
    current_stock: Decimal = Decimal("0")
    min_stock_level: Decimal = DEFAULT_MIN_STOCK_LEVEL
    max_stock_level: Decimal = DEFAULT_MAX_STOCK_LEVEL
    unit: str = "piece"
    sku: str | None = None
    supplier_id: str | None = None
    is_active: bool = True
    version: int = 0

    # --- Factory (used for NEW products only) ---------------------------------

    @staticmethod
    def create(
        product_id: str,
        name: str,
        cost_price: Money,
        selling_price: Money,
        min_stock_level: Decimal = DEFAULT_MIN_STOCK_LEVEL,
        max_stock_level: Decimal = DEFAULT_MAX_STOCK_LEVEL,
        unit: str = "piece",
        sku: str | None = None,
        supplier_id: str | None = None,
    ) -> Product:
        """Create a new product with zero stock.

        Initial stock is applied afterwards as a movement so that it is
        recorded in the ledger like any other change.
        """
        if not name or not name.strip():
            raise ValidationError("Product name is required")
        if len(name.strip()) > MAX_NAME_LENGTH:
            raise ValidationError(
                f"Product name cannot exceed {MAX_NAME_LENGTH} characters"
            )
        if unit not in UNITS:
            raise ValidationError(f"Unknown unit '{unit}'")

        product = Product(
            id=product_id,
            name=name.strip(),
            cost_price=cost_price,
            selling_price=selling_price,
            unit=unit,
            sku=sku.strip().upper() if sku else _default_sku(name, product_id),
            supplier_id=supplier_id,
        )
        product.update_levels(min_stock_level, max_stock_level)
        return product

    # --- Stock mutation -------------------------------------------------------

    def apply_movement(
        self, signed_delta: Decimal, clamp: bool = False
    ) -> tuple[Decimal, Decimal]:
        """Change the on-hand quantity by *signed_delta*.

        Returns ``(previous_stock, new_stock)``.  A decrement that would
        go below zero is rejected unless *clamp* is set, in which case the
        stock stops at zero and the caller must record the applied delta.
        """
        delta = to_quantity(signed_delta)
        if delta == 0:
            raise ValidationError("Stock movement quantity must be non-zero")

        previous = self.current_stock
        new = previous + delta
        if new < 0:
            if not clamp:
                raise InsufficientStockError(self.name, previous, -delta)
            new = Decimal("0")

        self.current_stock = new
        return previous, new

    # --- Catalog maintenance --------------------------------------------------

    def update_prices(
        self,
        cost_price: Money | None = None,
        selling_price: Money | None = None,
    ) -> None:
        """Change cost and/or selling price.

        Past ledger entries and documents keep the price they captured.
        """
        if cost_price is not None:
            self.cost_price = cost_price
        if selling_price is not None:
            self.selling_price = selling_price

    def update_levels(
        self,
        min_stock_level: Decimal | None = None,
        max_stock_level: Decimal | None = None,
    ) -> None:
        """Change reorder thresholds.

        ``min < max`` is expected but not enforced.
        """
        if min_stock_level is not None:
            value = to_quantity(min_stock_level)
            if value < 0:
                raise ValidationError("Minimum stock level cannot be negative")
            self.min_stock_level = value
        if max_stock_level is not None:
            value = to_quantity(max_stock_level)
            if value < 0:
                raise ValidationError("Maximum stock level cannot be negative")
            self.max_stock_level = value

    def deactivate(self) -> None:
        """Soft-delete: products are never removed because the ledger refers to them."""
        if not self.is_active:
            raise ValidationError(f"Product '{self.name}' is already inactive")
        self.is_active = False

    # --- Computed properties --------------------------------------------------

    @property
    def is_low_stock(self) -> bool:
        return self.current_stock <= self.min_stock_level

    @property
    def stock_value(self) -> Money:
        return self.cost_price * self.current_stock

    @property
    def profit_margin(self) -> Decimal:
        """Margin over cost, in percent."""
        if self.cost_price.amount == 0:
            return Decimal("0")
        margin = (self.selling_price.amount - self.cost_price.amount) / self.cost_price.amount
        return (margin * 100).quantize(Decimal("0.01"))


def _default_sku(name: str, product_id: str) -> str:
    return f"{name.strip()[:3].upper()}{product_id.replace('-', '')[:6].upper()}"
