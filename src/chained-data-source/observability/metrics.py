"""Business metrics for the Chained Data Source service.

Defines OpenTelemetry metrics for:
- Chain executions and per-link outcomes
- Silent token acquisition
"""

from opentelemetry import metrics

meter = metrics.get_meter(__name__)

# =============================================================================
# CHAIN METRICS
# =============================================================================

chain_executions = meter.create_counter(
    name="chained_data_source.chain.executions",
    description="Total chain executions",
    unit="1",
)

chain_links_executed = meter.create_counter(
    name="chained_data_source.chain.links",
    description="Chain links processed, by outcome",
    unit="1",
)

chain_execution_time = meter.create_histogram(
    name="chained_data_source.chain.execution_time",
    description="Time to execute a full chain",
    unit="ms",
)

# =============================================================================
# AUTHENTICATION METRICS
# =============================================================================

token_acquisitions = meter.create_counter(
    name="chained_data_source.auth.token_acquisitions",
    description="Successful silent token acquisitions",
    unit="1",
)

token_acquisition_failures = meter.create_counter(
    name="chained_data_source.auth.token_acquisition_failures",
    description="Failed silent token acquisitions",
    unit="1",
)
