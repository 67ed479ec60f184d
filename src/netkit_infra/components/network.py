"""Provider-agnostic network component interface and topology data model."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Protocol

import pulumi

logger: logging.Logger = logging.getLogger(__name__)

DEFAULT_ROUTE_CIDR: str = "0.0.0.0/0"


class NatStrategy(StrEnum):
    """How private subnets reach the internet."""

    NONE = "none"
    SINGLE = "single"
    ONE_PER_AZ = "one_per_az"


class SubnetKind(StrEnum):
    PUBLIC = "public"
    PRIVATE = "private"


@dataclass(frozen=True)
class SubnetSpec:
    """A single subnet requested by the caller.

    ``kind`` accepts plain strings so callers can feed raw configuration
    through; unknown values are rejected during provisioning.
    """

    kind: SubnetKind | str
    availability_zone: str
    cidr_block: str


class NetworkSpec:
    """Full description of the network to build.

    Args:
        cidr_block: CIDR of the VPC.
        subnets: Subnets in the order they are provisioned. Order decides
            resource names and the single-gateway NAT anchor.
        nat_strategy: NAT egress strategy for private subnets. ``None``
            behaves like ``NatStrategy.NONE``.
        tags: Tags applied to every taggable resource.
    """

    def __init__(
        self,
        cidr_block: str,
        subnets: Sequence[SubnetSpec],
        nat_strategy: NatStrategy | str | None = NatStrategy.NONE,
        tags: Mapping[str, str] | None = None,
    ) -> None:
        self.cidr_block: str = cidr_block
        self.subnets: tuple[SubnetSpec, ...] = tuple(subnets)
        self.nat_strategy: NatStrategy | str = (
            NatStrategy.NONE if nat_strategy is None else nat_strategy
        )
        self.tags: dict[str, str] = dict(tags or {})


@dataclass(frozen=True)
class ProvisionedSubnet:
    """A ``SubnetSpec`` paired with the subnet resource created for it."""

    spec: SubnetSpec
    resource: Any
    index: int

    @property
    def kind(self) -> SubnetKind | str:
        return self.spec.kind

    @property
    def availability_zone(self) -> str:
        return self.spec.availability_zone

    @property
    def cidr_block(self) -> str:
        return self.spec.cidr_block


@dataclass(frozen=True)
class NatGatewayHandle:
    """A created NAT gateway together with its elastic IP and anchor subnet."""

    resource: Any
    elastic_ip: Any
    subnet: ProvisionedSubnet

    @property
    def availability_zone(self) -> str:
        return self.subnet.availability_zone


@dataclass(frozen=True)
class RouteWiring:
    """One default route and the association that attaches it to a subnet."""

    subnet: ProvisionedSubnet
    route_table: Any
    route: Any
    association: Any
    target: Any


@dataclass
class ProvisionedNetwork:
    """Everything declared for one network, in creation order."""

    network: Any
    subnets: list[ProvisionedSubnet]
    internet_gateway: Any | None = None
    nat_gateways: list[NatGatewayHandle] = field(default_factory=list)
    public_routes: list[RouteWiring] = field(default_factory=list)
    private_routes: list[RouteWiring] = field(default_factory=list)

    @property
    def public_subnets(self) -> list[ProvisionedSubnet]:
        return [s for s in self.subnets if s.kind == SubnetKind.PUBLIC]

    @property
    def private_subnets(self) -> list[ProvisionedSubnet]:
        return [s for s in self.subnets if s.kind == SubnetKind.PRIVATE]


class NetworkProvisioner(Protocol):
    """Resource-creation backend the topology builder drives.

    Every call declares a resource and returns its handle immediately; the
    handle may be a forward reference resolved later by the engine.
    """

    def create_network(
        self, name: str, cidr_block: str, tags: Mapping[str, str]
    ) -> Any: ...

    def create_subnet(
        self,
        name: str,
        network: Any,
        cidr_block: str,
        availability_zone: str,
        auto_assign_public_ip: bool,
        tags: Mapping[str, str],
    ) -> Any: ...

    def create_internet_gateway(
        self, name: str, network: Any, tags: Mapping[str, str]
    ) -> Any: ...

    def lookup_main_route_table(self, network: Any) -> Any: ...

    def create_route_table(
        self, name: str, network: Any, tags: Mapping[str, str]
    ) -> Any: ...

    def create_route(
        self, name: str, route_table: Any, destination_cidr: str, target: Any
    ) -> Any: ...

    def associate_route_table(self, name: str, subnet: Any, route_table: Any) -> Any: ...

    def allocate_elastic_ip(self, name: str, tags: Mapping[str, str]) -> Any: ...

    def create_nat_gateway(
        self,
        name: str,
        subnet: Any,
        elastic_ip: Any,
        tags: Mapping[str, str],
        depends_on: Sequence[Any] | None = None,
    ) -> Any: ...


class NetworkOutputs:
    """Resolved outputs from a provisioned network component."""

    def __init__(
        self,
        vpc_id: pulumi.Output[str],
        public_subnet_ids: list[pulumi.Output[str]],
        private_subnet_ids: list[pulumi.Output[str]],
        nat_gateway_ids: list[pulumi.Output[str]] | None = None,
    ) -> None:
        self.vpc_id: pulumi.Output[str] = vpc_id
        self.public_subnet_ids: list[pulumi.Output[str]] = public_subnet_ids
        self.private_subnet_ids: list[pulumi.Output[str]] = private_subnet_ids
        self.nat_gateway_ids: list[pulumi.Output[str]] = nat_gateway_ids or []


class NetkitNetwork(Protocol):
    @property
    def outputs(self) -> NetworkOutputs: ...
