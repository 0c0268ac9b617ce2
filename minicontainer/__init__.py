"""Memory-limit monitoring, log buffering, control messages and test workloads for a container runtime."""

__version__ = "0.1.0"