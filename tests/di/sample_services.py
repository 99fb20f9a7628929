"""
Sample classes wired by the DI tests.

Kept at module level so constructor annotations resolve and dotted class
paths (``tests.di.sample_services.Database``) can be imported.
"""
import asyncio
from abc import ABC, abstractmethod
from typing import Any, List, Optional, Protocol

from di.component import ComponentAutoload, ComponentInitBlocking, ServiceLocatorAutoload
from di.service_locator import ServiceLocator


# =============================================================================
# Container samples
# =============================================================================

class Mailer(ABC):
    @abstractmethod
    def send(self, recipient: str, body: str) -> str:
        ...


class SmtpMailer(Mailer):
    def __init__(self, host: str = "localhost", port: int = 25):
        self.host = host
        self.port = port

    def send(self, recipient: str, body: str) -> str:
        return f"{self.host}:{self.port} -> {recipient}: {body}"


class Formatter(Protocol):
    def format(self, text: str) -> str:
        ...


class Database:
    def __init__(self, dsn: str = "sqlite://:memory:"):
        self.dsn = dsn


class Repository:
    def __init__(self, db: Database, table: str = "items"):
        self.db = db
        self.table = table


class ReportService:
    def __init__(self, repository: Repository, mailer: Mailer):
        self.repository = repository
        self.mailer = mailer


class NeedsMailer:
    def __init__(self, mailer: Mailer):
        self.mailer = mailer


class OptionalMailerConsumer:
    def __init__(self, mailer: Optional[Mailer] = None):
        self.mailer = mailer


class NeedsName:
    def __init__(self, name):
        self.name = name


class Variadic:
    def __init__(self, name, *extras, **options):
        self.name = name
        self.extras = extras
        self.options = options


class KeywordOnly:
    def __init__(self, *, db: Database, level: int = 1):
        self.db = db
        self.level = level


class CycleA:
    def __init__(self, b: "CycleB"):
        self.b = b


class CycleB:
    def __init__(self, a: CycleA):
        self.a = a


class Configurable:
    """Constructor takes ``dsn``; everything else arrives as properties."""

    def __init__(self, dsn: str = "default"):
        self.dsn = dsn
        self.ttl = None


# =============================================================================
# Service locator samples
# =============================================================================

class Cache:
    def __init__(self, ttl: int = 60):
        self.ttl = ttl


class AutoloadedComponent(ComponentAutoload):
    instances = 0

    def __init__(self):
        type(self).instances += 1


class AutoloadLocator(ServiceLocatorAutoload, ServiceLocator):
    """Locator that builds ``ComponentAutoload`` components on registration."""


class BlockingComponent(ComponentInitBlocking):
    """Initialization records its name into ``journal`` and may fail or stall."""

    def __init__(
        self,
        name: str,
        journal: List[str],
        fail: bool = False,
        delay: float = 0.0,
    ):
        self.name = name
        self.journal = journal
        self.fail = fail
        self.delay = delay
        self.init_calls = 0
        self._initialized = False

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    async def init_component(self) -> None:
        self.init_calls += 1
        self.journal.append(f"start:{self.name}")
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail:
            self.journal.append(f"fail:{self.name}")
            raise RuntimeError(f"{self.name} failed to initialize")
        self._initialized = True
        self.journal.append(f"done:{self.name}")


class AutoloadBlockingComponent(ComponentAutoload, ComponentInitBlocking):
    def __init__(self):
        self._initialized = False

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    async def init_component(self) -> None:
        self._initialized = True


def make_cache(container: Any, params: Any, config: dict) -> Cache:
    """Factory definition: ``(container, params, config) -> object``."""
    return Cache(ttl=config.get("ttl", 5))
