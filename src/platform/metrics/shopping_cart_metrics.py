from prometheus_client import Counter, Gauge, Histogram


class ShoppingCartMetrics:
    """
    Shopping cart / reservation engine metrics

    Tracks cart operations, clamps and seat conflicts per event.
    """

    def __init__(self) -> None:
        self.cart_operations = Counter(
            'shopping_cart_operations_total',
            'Total shopping cart operations',
            ['event_id', 'operation', 'result'],  # result: success/rejected/error
        )

        self.cart_operation_duration = Histogram(
            'shopping_cart_operation_duration_seconds',
            'Shopping cart operation duration (including lock wait)',
            ['operation'],
            buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 2.0],
        )

        self.ticket_clamps = Counter(
            'shopping_cart_ticket_clamps_total',
            'Ticket requests reduced below the requested amount',
            ['event_id', 'reason'],  # reason: online_max/contingent/visitors
        )

        self.seat_conflicts = Counter(
            'shopping_cart_seat_conflicts_total',
            'Seat requests rejected because of seat state',
            ['event_id', 'state'],  # state: sold/reserved/blocked
        )

        self.active_connections = Gauge(
            'shopping_cart_active_connections',
            'Connected websocket sessions',
            ['event_id'],
        )

    def record_operation(self, *, event_id: str, operation: str, result: str) -> None:
        self.cart_operations.labels(event_id=event_id, operation=operation, result=result).inc()

    def record_clamp(self, *, event_id: str, reason: str) -> None:
        self.ticket_clamps.labels(event_id=event_id, reason=reason).inc()

    def record_seat_conflict(self, *, event_id: str, state: str) -> None:
        self.seat_conflicts.labels(event_id=event_id, state=state).inc()


# Global metrics instance
metrics = ShoppingCartMetrics()
