from .setup import setup_observability
from .metrics import (
    storefront_orders_total,
    storefront_order_duration_seconds,
    storefront_items_sold_total,
    storefront_out_of_stock_total
)
