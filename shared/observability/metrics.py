from prometheus_client import Counter, Histogram

# Business Metrics
storefront_orders_total = Counter(
    "storefront_orders_total",
    "Total order placements processed",
    ["status"] # Labels: 'placed', 'rejected', 'failed'
)

storefront_order_duration_seconds = Histogram(
    "storefront_order_duration_seconds",
    "Order placement duration in seconds"
)

storefront_items_sold_total = Counter(
    "storefront_items_sold_total",
    "Total product units sold through placed orders"
)

storefront_out_of_stock_total = Counter(
    "storefront_out_of_stock_total",
    "Times an order drove a product's stock down to zero"
)
