from prometheus_client import start_http_server, Gauge, Counter, CollectorRegistry

class Metrics:
    """
    Client-side metrics on a private registry:
    - vault_client_requests_total{method, outcome="ok|client_error|error"} (Counter)
    - vault_client_attempts_total{method} (Counter): every HTTP attempt, retries included
    - vault_client_last_status_code (Gauge)
    - vault_client_last_success_time_seconds, vault_client_last_error_time_seconds (Gauges)
    """
    OUTCOMES = ("ok", "client_error", "error")

    def __init__(self, port: int | None = None, registry: CollectorRegistry | None = None):
        # свой реестр, без process_/python_ метрик
        self.registry = registry or CollectorRegistry()

        self.REQUESTS     = Counter("vault_client_requests_total", "Logical requests", ["method", "outcome"], registry=self.registry)
        self.ATTEMPTS     = Counter("vault_client_attempts_total", "HTTP attempts", ["method"], registry=self.registry)
        self.LAST_STATUS  = Gauge("vault_client_last_status_code", "Last HTTP status received", registry=self.registry)
        self.LAST_SUCCESS = Gauge("vault_client_last_success_time_seconds", "Last success time (unix seconds)", registry=self.registry)
        self.LAST_ERROR   = Gauge("vault_client_last_error_time_seconds", "Last error time (unix seconds)", registry=self.registry)

        if port is not None:
            start_http_server(port, registry=self.registry)

    def attempt(self, method: str):   self.ATTEMPTS.labels(method).inc()

    def response(self, method: str, status: int, when: float):
        self.LAST_STATUS.set(status)
        if status >= 400:
            self.REQUESTS.labels(method, "client_error").inc()
            self.LAST_ERROR.set(when)
        else:
            self.REQUESTS.labels(method, "ok").inc()
            self.LAST_SUCCESS.set(when)

    def failure(self, method: str, when: float):
        self.REQUESTS.labels(method, "error").inc()
        self.LAST_ERROR.set(when)
