"""Circuit breaker implementation for the design system server.

Implements the circuit breaker pattern per named resource to protect
callers from cascading failures of slow or erroring operations.

The circuit breaker has three states:
- CLOSED: Normal operation, failures are counted
- OPEN: Circuit tripped, calls immediately fail
- HALF_OPEN: Testing recovery, limited trial calls allowed
"""

from .breaker import CircuitBreaker, CircuitBreakerStats
from .registry import CircuitBreakerRegistry

__all__ = [
    "CircuitBreaker",
    "CircuitBreakerStats",
    "CircuitBreakerRegistry",
]
