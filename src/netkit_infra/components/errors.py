"""Exception hierarchy raised while validating and building a network topology."""

from __future__ import annotations


class NetworkError(Exception):
    """Base class for every netkit network failure."""


class NetworkConfigError(NetworkError, ValueError):
    """The network specification is inconsistent; raised before any resource exists."""


class UnsupportedNatStrategyError(NetworkConfigError):
    def __init__(self, strategy: object) -> None:
        super().__init__(f"NAT strategy {strategy!r} not supported")
        self.strategy: object = strategy


class MissingPublicSubnetError(NetworkConfigError):
    def __init__(self, strategy: object) -> None:
        super().__init__(
            f"NAT strategy {strategy!r} requires at least one public subnet"
        )
        self.strategy: object = strategy


class EmptySubnetListError(NetworkConfigError):
    def __init__(self) -> None:
        super().__init__("No subnet configurations provided")


class UnsupportedSubnetKindError(NetworkConfigError):
    def __init__(self, kind: object) -> None:
        super().__init__(f"Subnet kind {kind!r} not supported")
        self.kind: object = kind


class NetworkProvisionError(NetworkError, RuntimeError):
    """Provisioning could not proceed; the partial graph is left to the engine."""


class NoPublicSubnetError(NetworkProvisionError):
    def __init__(self, strategy: object) -> None:
        super().__init__(
            f"No public subnets found to support NAT strategy {strategy!r}"
        )
        self.strategy: object = strategy


class ResourceCreationError(NetworkProvisionError):
    """A provisioner call failed.

    Args:
        step: The provisioning step that was running, e.g. ``create_subnet``.
        resource_name: Logical name of the resource being declared, if any.
    """

    def __init__(self, step: str, resource_name: str | None = None) -> None:
        target = f" for {resource_name!r}" if resource_name else ""
        super().__init__(f"Provisioning step {step}{target} failed")
        self.step: str = step
        self.resource_name: str | None = resource_name
