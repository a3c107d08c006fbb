# decay_airdrop/monitoring.py
import psutil
from prometheus_client import Counter, Gauge, Histogram, CollectorRegistry
from prometheus_client.exposition import make_wsgi_app
from wsgiref.simple_server import make_server, WSGIServer
from socketserver import ThreadingMixIn
import threading
import logging

logger = logging.getLogger(__name__)

class ThreadingWSGIServer(ThreadingMixIn, WSGIServer):
    allow_reuse_address = True
    daemon_threads = True

class Monitor:
    def __init__(self, engine, host="127.0.0.1", port=9090, start_server=True):
        self.engine = engine
        self.host = host
        self.port = port
        self.server = None
        self.thread = None

        self.registry = CollectorRegistry()

        self.claim_counter = Counter('airdrop_claims_total', 'Claim attempts by outcome', ['status'], registry=self.registry)
        self.claim_latency = Histogram('airdrop_claim_latency_seconds', 'Time to process a claim', registry=self.registry)
        self.remaining_supply = Gauge('airdrop_remaining_supply', 'Undistributed airdrop supply (smallest unit)', registry=self.registry)
        self.claim_ratio = Gauge('airdrop_claim_ratio', 'Claim ratio for the next claim (1e18 = 1%)', registry=self.registry)
        self.claim_count = Gauge('airdrop_claim_count', 'Successful claims so far', registry=self.registry)
        self.cpu_usage = Gauge('system_cpu_percent', 'Current CPU usage percent', registry=self.registry)
        self.memory_usage = Gauge('system_memory_percent', 'Current memory usage percent', registry=self.registry)

        if start_server:
            self.start_server()

    def start_server(self):
        """Serve the registry over HTTP on a daemon thread."""
        app = make_wsgi_app(self.registry)
        try:
            self.server = make_server(self.host, self.port, app, ThreadingWSGIServer)
        except OSError as e:
            logger.error(f"Failed to bind metrics server to {self.host}:{self.port}: {e}")
            raise

        # Port 0 lets the OS pick one
        self.port = self.server.server_port
        self.thread = threading.Thread(target=self.server.serve_forever, daemon=True)
        self.thread.start()
        logger.info(f"Airdrop metrics on http://{self.host}:{self.port}/metrics")

    def stop_server(self):
        if self.server:
            self.server.shutdown()
            self.server.server_close()
            self.server = None
            logger.info("Airdrop metrics server stopped")

    def update(self):
        # Big integers lose precision as floats; gauges are for dashboards only
        state = self.engine.snapshot()
        self.remaining_supply.set(state.supply)
        self.claim_ratio.set(state.ratio)
        self.claim_count.set(state.claim_count)

        self.cpu_usage.set(psutil.cpu_percent())
        self.memory_usage.set(psutil.virtual_memory().percent)

    def record_claim(self, status: str, latency: float):
        self.claim_counter.labels(status=status).inc()
        self.claim_latency.observe(latency)
