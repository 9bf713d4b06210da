"""
Capability registry.

A capability is an optional behaviour unit attached to a connector or a
request. Capabilities are declared explicitly, either through a
``capabilities`` class attribute (collected along the owner's MRO, base
classes first) or at runtime through CapabilityRegistry.attach(). A
capability may itself require further capabilities, which are discovered
recursively.
"""

import copy
import logging
import weakref
from typing import Any, Iterable, List, Optional, Set, Tuple, Type, Union


logger = logging.getLogger(__name__)


class Capability:
    """
    Base class for capabilities.

    Subclasses override boot() to act on the in-progress PendingRequest.
    The registry binds a copy of the capability to its owner before
    booting, so ``self.owner`` is the connector or request that declared it.

    Attributes:
        requires: Further capabilities attached by this one
    """

    requires: Tuple[Union[Type["Capability"], "Capability"], ...] = ()

    def __init__(self, owner: Any = None):
        self.owner = owner

    @property
    def name(self) -> str:
        return type(self).__name__

    def bind(self, owner: Any) -> "Capability":
        """Return a copy of this capability bound to the owner."""
        bound = copy.copy(self)
        bound.owner = owner
        return bound

    def has_boot(self) -> bool:
        return type(self).boot is not Capability.boot

    def boot(self, pending_request) -> None:
        """Hook run once per PendingRequest. No-op by default."""
        pass

    def __repr__(self) -> str:
        return f"{self.name}()"


CapabilitySpec = Union[Type[Capability], Capability]


def _instantiate(spec: CapabilitySpec) -> Capability:
    if isinstance(spec, Capability):
        return spec
    if isinstance(spec, type) and issubclass(spec, Capability):
        return spec()
    raise TypeError(f"Not a capability: {spec!r}")


class CapabilityRegistry:
    """
    Maps owner instances to their attached capabilities.

    Runtime attachments are held weakly per owner, so the registry never
    keeps a connector or request alive.

    Example:
        >>> registry = CapabilityRegistry()
        >>> registry.attach(connector, AcceptsJson)
        >>> [c.name for c in registry.resolve(connector)]
        ['AcceptsJson']
    """

    def __init__(self):
        self._attached: "weakref.WeakKeyDictionary[Any, List[CapabilitySpec]]" = (
            weakref.WeakKeyDictionary()
        )

    def attach(self, owner: Any, capability: CapabilitySpec) -> None:
        """Attach a capability to one owner instance."""
        _instantiate(capability)
        self._attached.setdefault(owner, []).append(capability)
        logger.debug(f"Attached capability {getattr(capability, '__name__', capability)} to {type(owner).__name__}")

    def copy_attachments(self, source: Any, target: Any) -> None:
        """Give a cloned owner the runtime attachments of its source."""
        for spec in self._attached.get(source, []):
            self._attached.setdefault(target, []).append(spec)

    def declared(self, owner: Any) -> List[CapabilitySpec]:
        """Capabilities declared directly on the owner, in declaration order."""
        specs: List[CapabilitySpec] = []
        for klass in reversed(type(owner).__mro__):
            specs.extend(klass.__dict__.get("capabilities", ()) or ())
        specs.extend(self._attached.get(owner, []))
        return specs

    def resolve(self, owner: Any) -> List[Capability]:
        """
        Every capability attached to the owner, including those required
        by other capabilities, bound to the owner.

        Each capability type appears once, at its first position in a
        depth-first walk of the declarations.
        """
        resolved: List[Capability] = []
        seen: Set[type] = set()
        self._walk(self.declared(owner), owner, resolved, seen)
        return resolved

    def _walk(
        self,
        specs: Iterable[CapabilitySpec],
        owner: Any,
        resolved: List[Capability],
        seen: Set[type],
    ) -> None:
        for spec in specs:
            capability = _instantiate(spec)
            if type(capability) in seen:
                continue
            seen.add(type(capability))
            resolved.append(capability.bind(owner))
            self._walk(capability.requires, owner, resolved, seen)

    def has(self, owner: Any, capability_type: Type[Capability]) -> bool:
        return any(isinstance(c, capability_type) for c in self.resolve(owner))

    def find(self, owner: Any, capability_type: Type[Capability]) -> Optional[Capability]:
        """First resolved capability of the given type, or None."""
        for capability in self.resolve(owner):
            if isinstance(capability, capability_type):
                return capability
        return None

    def boot(self, pending_request, owner: Any) -> None:
        """Boot every capability of one owner. Errors propagate unchanged."""
        for capability in self.resolve(owner):
            if not capability.has_boot():
                continue
            logger.debug(f"Booting capability {capability.name} on {type(owner).__name__}")
            capability.boot(pending_request)

    def boot_all(self, pending_request, connector: Any, request: Any) -> None:
        """Boot connector capabilities, then request capabilities."""
        self.boot(pending_request, connector)
        self.boot(pending_request, request)


default_registry = CapabilityRegistry()
