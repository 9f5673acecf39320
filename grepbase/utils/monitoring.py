"""Monitoring utilities leveraging Prometheus client."""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

http_requests_total = Counter(
    "grepbase_http_requests_total",
    "Total HTTP requests",
    ["method", "route", "status"],
)

http_request_latency_seconds = Histogram(
    "grepbase_http_request_latency_seconds",
    "HTTP request latency",
    ["method", "route"],
)

documents_ingested_total = Counter(
    "grepbase_documents_ingested_total",
    "Documents submitted for ingestion, by outcome",
    ["source", "result"],
)

documents_processed_total = Counter(
    "grepbase_documents_processed_total",
    "Documents run through enrichment, by outcome",
    ["source", "status"],
)

document_processing_seconds = Histogram(
    "grepbase_document_processing_seconds",
    "Wall time spent enriching a single document",
    ["source"],
    buckets=(0.5, 1, 2.5, 5, 10, 30, 60, 120, 300),
)

processing_queue_size = Gauge(
    "grepbase_processing_queue_size",
    "References waiting in the processing queue",
)

llm_tokens_total = Counter(
    "grepbase_llm_tokens_total",
    "Tokens consumed by enrichment calls",
    ["direction"],
)


def observe_ingestion(source: str, result: str) -> None:
    documents_ingested_total.labels(source=source, result=result).inc()


def observe_processing(
    source: str,
    success: bool,
    duration_seconds: float,
    input_tokens: int = 0,
    output_tokens: int = 0,
) -> None:
    documents_processed_total.labels(source=source, status="success" if success else "failure").inc()
    document_processing_seconds.labels(source=source).observe(duration_seconds)
    if input_tokens:
        llm_tokens_total.labels(direction="input").inc(input_tokens)
    if output_tokens:
        llm_tokens_total.labels(direction="output").inc(output_tokens)


def observe_request(method: str, route: str, status: int, duration_seconds: float) -> None:
    http_requests_total.labels(method=method, route=route, status=str(status)).inc()
    http_request_latency_seconds.labels(method=method, route=route).observe(duration_seconds)
