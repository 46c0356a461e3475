"""Prometheus metrics for monitoring."""

from prometheus_client import Counter, Histogram

chat_requests_total = Counter("dataroom_chat_requests_total",
                              "Total number of chat requests processed")
chat_errors_total = Counter(
    "dataroom_chat_errors_total", "Total number of chat request errors", ["reason"])
chat_latency_seconds = Histogram(
    "dataroom_chat_latency_seconds", "Chat request latency in seconds",
    buckets=[0.5, 1.0, 2.0, 5.0, 10.0, 30.0])

embedding_requests_total = Counter(
    "dataroom_embedding_requests_total", "Total number of embedding calls issued")
generation_requests_total = Counter(
    "dataroom_generation_requests_total", "Total number of completion calls issued")
fallback_contexts_total = Counter(
    "dataroom_fallback_contexts_total",
    "Chat requests answered from unranked whole documents")
citation_parse_failures_total = Counter(
    "dataroom_citation_parse_failures_total",
    "Model outputs whose citation block could not be decoded")
