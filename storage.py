from contextlib import contextmanager
from typing import Iterator, Optional

from config import get_settings
from database import session_scope
from gateway import PersistenceGateway
from memory_gateway import InMemoryGateway
from sql_gateway import SqlGateway

BACKENDS = ("sql", "memory")

_memory_gateway: Optional[InMemoryGateway] = None


def memory_gateway() -> InMemoryGateway:
    global _memory_gateway
    if _memory_gateway is None:
        _memory_gateway = InMemoryGateway()
    return _memory_gateway


@contextmanager
def gateway_scope(backend: Optional[str] = None) -> Iterator[PersistenceGateway]:
    """Yield the configured gateway for one request."""
    backend = backend or get_settings().storage_backend
    if backend == "memory":
        yield memory_gateway()
    elif backend == "sql":
        with session_scope() as session:
            yield SqlGateway(session)
    else:
        raise ValueError(f"Unknown storage backend: {backend}")
