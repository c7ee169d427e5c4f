
from prometheus_fastapi_instrumentator import Instrumentator,metrics

instrumentator = Instrumentator(
    should_ignore_untemplated=True,      # /orders/123 -> /orders/{order_id}
    excluded_handlers=["/metrics", "/api/v1/health"],
    should_instrument_requests_inprogress=True,
    should_group_status_codes=False,
)

instrumentator.add(metrics.requests())
instrumentator.add(metrics.latency(buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1, 2, 5)))
