"""
Docker State Exporter for Prometheus

Exposes the lifecycle state of every container on a host (status, health,
restart count, start/finish times and OOM kills) as Prometheus gauges. Docker
inspect results are cached for a short window shared by concurrent scrapes.
"""

__version__ = "1.0.0"
