"""
Prometheus metrics shared by the API and the ledger services
"""

from prometheus_client import Counter, Histogram, Gauge

# HTTP metrics
REQUEST_COUNT = Counter('http_requests_total', 'Total HTTP requests', ['method', 'endpoint', 'status'])
REQUEST_DURATION = Histogram('http_request_duration_seconds', 'HTTP request duration', ['method', 'endpoint'])
ACTIVE_CONNECTIONS = Gauge('http_active_connections', 'Number of active HTTP connections')

# Ledger metrics
OPERATION_COUNT = Counter('ledger_operations_total', 'Ledger operations by outcome', ['kind', 'status'])
COMPENSATION_COUNT = Counter('ledger_compensations_total', 'Saga steps compensated', ['step'])
REGISTRATION_COUNT = Counter('tournament_registrations_total', 'Tournament registrations', ['status'])
PRIZE_DISTRIBUTED = Counter('prize_distributed_minor_units_total', 'Prize money credited to winners')
RECONCILED_COUNT = Counter('ledger_reconciled_total', 'Stale journal entries resolved', ['status'])
