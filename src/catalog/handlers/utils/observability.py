"""
Centralized observability utilities for the products API.

This module provides configured instances of AWS Lambda Powertools for logging,
tracing, and metrics collection shared by the handler, logic and data access layers.
"""

from aws_lambda_powertools.logging import Logger
from aws_lambda_powertools.metrics import Metrics
from aws_lambda_powertools.tracing import Tracer

# Metrics namespace for business KPIs
METRICS_NAMESPACE = 'ProductsApi'

# JSON output format, service name can be set by environment variable "POWERTOOLS_SERVICE_NAME"
# Level is read from "LOG_LEVEL"
logger: Logger = Logger()

# Disabled by setting POWERTOOLS_TRACE_DISABLED to "true"
tracer: Tracer = Tracer()

# Service name dimension is taken from POWERTOOLS_SERVICE_NAME
metrics = Metrics(namespace=METRICS_NAMESPACE)
