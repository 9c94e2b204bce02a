from decimal import Decimal
from django.db import models


# ---------- Inventory items ----------
class InventoryItem(models.Model):  # Something the business buys & sells

    # Stock Keeping Unit, unique across the catalogue
    sku = models.CharField(max_length=80, unique=True)
    # Required human-readable name of the item
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True, default="")
    category = models.CharField(max_length=100)

    # cost_price feeds the COGS lines of sales and sale returns
    cost_price = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00"))
    selling_price = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00"))

    # Current stock level, only moved by inventory transactions
    quantity = models.DecimalField(
        max_digits=14,
        decimal_places=4,  # Allow precise tracking
        default=Decimal("0"),
    )
    # At or below this level the item shows up as "low stock"
    reorder_level = models.DecimalField(
        max_digits=14, decimal_places=4, default=Decimal("10"))
    location = models.CharField(max_length=200, blank=True, default="")
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        # for fast lookups
        indexes = [models.Index(fields=["category", "name"], name="item_category_name_idx")]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gte=0),
                name="item_quantity_non_negative",
            ),
            models.CheckConstraint(
                condition=models.Q(cost_price__gte=0) & models.Q(selling_price__gte=0),
                name="item_prices_non_negative",
            ),
        ]

    def __str__(self):
        return f"{self.sku} – {self.name}"

    @property
    def is_low_stock(self):
        return self.quantity <= self.reorder_level

    def save(self, *args, **kwargs):
        self.full_clean()  # run validations before saving
        return super().save(*args, **kwargs)
