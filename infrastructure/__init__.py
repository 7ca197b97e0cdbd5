"""Infrastructure layer: observability for the emotion letterbox.

Modules:
    metrics     Prometheus metrics registry and the metrics-backed pipeline observer.
"""
