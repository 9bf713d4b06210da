"""
Two-phase middleware pipeline.

Request-phase handlers receive the PendingRequest before dispatch and may
return a SimulatedResponsePayload to short-circuit the transport.
Response-phase handlers receive the Response after dispatch and may return
a replacement Response.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Set

from ..core.models import SimulatedResponsePayload
from ..repositories.stores import LockableMixin


logger = logging.getLogger(__name__)


RequestHandler = Callable[[Any], Optional[SimulatedResponsePayload]]
ResponseHandler = Callable[[Any], Optional[Any]]


@dataclass
class Pipe:
    """
    A registered handler.

    Attributes:
        handler: The callable to invoke
        name: Optional unique name within its phase
        always: Run even when the name has been disabled
    """
    handler: Callable
    name: Optional[str] = None
    always: bool = False


class MiddlewarePipeline(LockableMixin):
    """
    Ordered request-phase and response-phase handler chains.

    Handlers run strictly in registration order. There is deliberately no
    way to prepend or reorder handlers. Registering a handler under a name
    that already exists in the same phase is skipped, so re-registration is
    idempotent.

    Example:
        >>> pipeline = MiddlewarePipeline()
        >>> pipeline.on_request(lambda pending: pending.headers.add("X-Trace", "1"), name="trace")
        >>> pipeline.on_response(lambda response: None)
    """

    _label = "middleware"

    def __init__(self):
        self._locked = False
        self._request_pipes: List[Pipe] = []
        self._response_pipes: List[Pipe] = []
        self._disabled: Set[str] = set()

    def on_request(
        self,
        handler: RequestHandler,
        name: Optional[str] = None,
        always: bool = False,
    ) -> "MiddlewarePipeline":
        """Register a request-phase handler."""
        self._ensure_unlocked()
        self._register(self._request_pipes, Pipe(handler, name, always), "request")
        return self

    def on_response(
        self,
        handler: ResponseHandler,
        name: Optional[str] = None,
        always: bool = False,
    ) -> "MiddlewarePipeline":
        """Register a response-phase handler."""
        self._ensure_unlocked()
        self._register(self._response_pipes, Pipe(handler, name, always), "response")
        return self

    def _register(self, pipes: List[Pipe], pipe: Pipe, phase: str) -> None:
        if pipe.name is not None and any(existing.name == pipe.name for existing in pipes):
            logger.debug(f"Skipping duplicate {phase} middleware: {pipe.name}")
            return
        pipes.append(pipe)

    def merge(self, other: "MiddlewarePipeline") -> "MiddlewarePipeline":
        """Append every handler of another pipeline, preserving its order."""
        self._ensure_unlocked()
        for pipe in other._request_pipes:
            self._register(self._request_pipes, pipe, "request")
        for pipe in other._response_pipes:
            self._register(self._response_pipes, pipe, "response")
        self._disabled |= other._disabled
        return self

    def disable(self, name: str) -> "MiddlewarePipeline":
        """Skip the named handler in both phases unless it was registered with always=True."""
        self._ensure_unlocked()
        self._disabled.add(name)
        return self

    def enable(self, name: str) -> "MiddlewarePipeline":
        self._ensure_unlocked()
        self._disabled.discard(name)
        return self

    def is_disabled(self, name: str) -> bool:
        return name in self._disabled

    def request_names(self) -> List[Optional[str]]:
        return [pipe.name for pipe in self._request_pipes]

    def response_names(self) -> List[Optional[str]]:
        return [pipe.name for pipe in self._response_pipes]

    def request_pipes(self) -> List[Pipe]:
        return list(self._request_pipes)

    def response_pipes(self) -> List[Pipe]:
        return list(self._response_pipes)

    def clone(self) -> "MiddlewarePipeline":
        cloned = MiddlewarePipeline()
        cloned._request_pipes = list(self._request_pipes)
        cloned._response_pipes = list(self._response_pipes)
        cloned._disabled = set(self._disabled)
        return cloned

    def _should_run(self, pipe: Pipe) -> bool:
        if pipe.always or pipe.name is None:
            return True
        return pipe.name not in self._disabled

    def execute_request_pipeline(self, pending_request):
        """
        Run every request-phase handler against the pending request.

        A handler returning a SimulatedResponsePayload attaches it to the
        pending request.
        """
        for pipe in list(self._request_pipes):
            if not self._should_run(pipe):
                logger.debug(f"Request middleware disabled: {pipe.name}")
                continue

            result = pipe.handler(pending_request)

            if isinstance(result, SimulatedResponsePayload):
                pending_request.set_simulated_response(result)

        return pending_request

    def execute_response_pipeline(self, response):
        """
        Run every response-phase handler, threading replacements through.

        Returns:
            The final response
        """
        from ..http.response import Response

        for pipe in list(self._response_pipes):
            if not self._should_run(pipe):
                logger.debug(f"Response middleware disabled: {pipe.name}")
                continue

            result = pipe.handler(response)

            if result is None:
                continue
            if not isinstance(result, Response):
                raise TypeError(
                    f"Response middleware must return None or a Response, got {type(result).__name__}"
                )
            response = result

        return response

    def __len__(self) -> int:
        return len(self._request_pipes) + len(self._response_pipes)
