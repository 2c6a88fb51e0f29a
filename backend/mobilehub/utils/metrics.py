# /mobilehub/utils/metrics.py

from prometheus_client import Counter, Histogram

# This file defines all Prometheus metrics used for application monitoring.
# Centralizing them here makes them easy to find and manage.

# Business Logic Metrics
messages_analyzed_counter = Counter('whatsapp_messages_analyzed_total', 'Inbound messages analysed', ['intent'])
inventory_queries_counter = Counter('inventory_queries_total', 'Inventory store queries', ['stage', 'status'])
response_time_histogram = Histogram('response_time_seconds', 'Response time in seconds', ['endpoint'])
database_operations_counter = Counter('database_operations_total', 'Database operations', ['operation', 'status'])

# Security Metrics
webhook_signature_counter = Counter('webhook_signature_verifications_total', 'Webhook signature verifications', ['status'])

# Performance Metrics
cache_operations = Counter('cache_operations_total', 'Cache operations', ['operation', 'status'])
