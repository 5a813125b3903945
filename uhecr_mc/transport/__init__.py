"""Transport module: sequential and multiprocess propagation drivers."""

from uhecr_mc.transport.engine import PropagationEngine

__all__ = ["PropagationEngine"]
