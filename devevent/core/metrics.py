"""
Metrics instrumentation for the write path.
Counters are process-wide; any outer surface can expose them via render_metrics().
"""

from prometheus_client import Counter, generate_latest, CONTENT_TYPE_LATEST

# Event metrics
event_writes = Counter(
    'event_writes_total',
    'Event create/update attempts',
    ['status']  # created, updated, duplicate, rejected
)

# Booking metrics
booking_attempts = Counter(
    'booking_attempts_total',
    'Total booking attempts',
    ['status']  # success, duplicate, rejected
)

# Database metrics
db_connection_attempts = Counter(
    'db_connection_attempts_total',
    'Shared connection establishment attempts',
    ['result']  # established, failed
)

db_operations = Counter(
    'db_operations_total',
    'Total database operations',
    ['operation']  # read, write, exists
)


def render_metrics() -> tuple[bytes, str]:
    """Prometheus exposition payload and its content type."""
    return generate_latest(), CONTENT_TYPE_LATEST


def record_event_write(status: str):
    """Record event write. Status: created, updated, duplicate, rejected"""
    event_writes.labels(status=status).inc()


def record_booking_attempt(status: str):
    """Record booking attempt. Status: success, duplicate, rejected"""
    booking_attempts.labels(status=status).inc()


def record_connection_attempt(established: bool):
    result = "established" if established else "failed"
    db_connection_attempts.labels(result=result).inc()


def record_db_operation(operation: str):
    """Record database operation. Operation: read, write, exists"""
    db_operations.labels(operation=operation).inc()
