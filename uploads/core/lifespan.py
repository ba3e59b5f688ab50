"""Lifespan management with event-based architecture for robyn-uploads."""

from abc import ABC, abstractmethod
from collections.abc import Callable, Coroutine, Iterator
from typing import Any

from robyn import Robyn

from uploads.core.logger import LogIcon, logger
from uploads.core.settings import settings as st

AsyncHandler = Callable[[], Coroutine[Any, Any, None]]


class State:
    """Application state shared with handlers through Robyn global injection."""

    __slots__ = ("_data",)

    def __init__(self) -> None:
        object.__setattr__(self, "_data", {})

    def __getattr__(self, name: str) -> Any:
        try:
            return self._data[name]
        except KeyError:
            raise AttributeError(f"State has no attribute '{name}'") from None

    def __setattr__(self, name: str, value: Any) -> None:
        self._data[name] = value

    def __contains__(self, name: str) -> bool:
        return name in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def get(self, name: str, default: Any = None) -> Any:
        return self._data.get(name, default)

    def clear(self) -> None:
        self._data.clear()


class BaseEvent[T](ABC):
    """A resource created on startup, stored in ``State`` under ``name`` and released on shutdown."""

    name: str
    state: State

    @abstractmethod
    async def startup(self) -> T: ...

    async def shutdown(self, instance: T) -> None:  # noqa: B027
        """Optional cleanup. Override if cleanup is needed."""

    @classmethod
    def has_shutdown(cls) -> bool:
        return cls.shutdown is not BaseEvent.shutdown


class Lifespan:
    """Runs registered events in order on startup and in reverse order on shutdown."""

    def __init__(self, app: Robyn) -> None:
        self._app = app
        self._event_classes: list[type[BaseEvent[Any]]] = []
        self._events: list[BaseEvent[Any]] = []
        self._state: State | None = None

    def register(self, event_cls: type[BaseEvent[Any]]) -> "Lifespan":
        """Register an event class. Returns self for chaining."""
        self._event_classes.append(event_cls)
        return self

    @property
    def state(self) -> State | None:
        return self._state

    @property
    def events(self) -> list[BaseEvent[Any]]:
        return self._events

    async def _startup(self) -> None:
        logger.info("Starting application lifespan", icon=LogIcon.START, version=st.API_VERSION)
        self._state = State()

        for event_cls in self._event_classes:
            event = event_cls()
            event.state = self._state
            setattr(self._state, event.name, await event.startup())
            self._events.append(event)
            logger.info(f"Event ready: {event.name}", icon=LogIcon.SUCCESS)

        self._app.inject_global(state=self._state)

    async def _shutdown(self) -> None:
        if not self._state:
            logger.info("No state to cleanup", icon=LogIcon.WARNING)
            return

        for event in reversed(self._events):
            if event.has_shutdown() and event.name in self._state:
                await event.shutdown(getattr(self._state, event.name))
                logger.info(f"Shutdown complete: {event.name}", icon=LogIcon.SUCCESS)

        self._state.clear()
        logger.info("Cleanup complete", icon=LogIcon.COMPLETE)

    @property
    def startup(self) -> AsyncHandler:
        return self._startup

    @property
    def shutdown(self) -> AsyncHandler:
        return self._shutdown


def create_lifespan(app: Robyn) -> Lifespan:
    """Create lifespan manager for event registration."""
    return Lifespan(app)
