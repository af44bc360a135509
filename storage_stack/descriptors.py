"""Typed descriptors for the resources of the storage application stack.

A descriptor is a static configuration record. It never holds a provisioned
value: anything known only after deployment is expressed as a `Deferred`
reference and resolved by the Pulumi engine.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Dict, Optional, Tuple

from storage_stack.errors import InvalidConfigurationError


class ResourceKind(str, Enum):
    NETWORK = 'network'
    BUCKET = 'bucket'
    DATABASE = 'database'
    REGISTRY = 'registry'
    CLUSTER = 'cluster'
    ROLE = 'role'
    SERVICE = 'service'
    USER_DIRECTORY = 'user_directory'
    USER_DIRECTORY_CLIENT = 'user_directory_client'


class RemovalPolicy(str, Enum):
    DESTROY = 'destroy'
    RETAIN = 'retain'


class Access(str, Enum):
    READ = 'read'
    WRITE = 'write'
    CONNECT = 'connect'


# Attributes each kind exposes once provisioned.
ATTRIBUTES = {
    ResourceKind.NETWORK: frozenset({'vpc_id'}),
    ResourceKind.BUCKET: frozenset({'bucket_name', 'bucket_arn'}),
    ResourceKind.DATABASE: frozenset({'endpoint_address', 'endpoint_port', 'secret_arn'}),
    ResourceKind.REGISTRY: frozenset({'repository_url'}),
    ResourceKind.CLUSTER: frozenset({'cluster_arn'}),
    ResourceKind.ROLE: frozenset({'role_arn'}),
    ResourceKind.SERVICE: frozenset({'load_balancer_dns_name'}),
    ResourceKind.USER_DIRECTORY: frozenset({'user_pool_id'}),
    ResourceKind.USER_DIRECTORY_CLIENT: frozenset({'client_id'}),
}

GRANTABLE = {
    ResourceKind.BUCKET: frozenset({Access.READ, Access.WRITE}),
    ResourceKind.DATABASE: frozenset({Access.CONNECT}),
}


@dataclass(frozen=True)
class Deferred:
    """Placeholder for an attribute of another resource, known only after provisioning."""
    resource_id: str
    attribute: str

    def __str__(self):
        return f'${{{self.resource_id}.{self.attribute}}}'


@dataclass(frozen=True)
class Descriptor:
    id: str

    kind: ClassVar[ResourceKind]

    def validate(self):
        pass

    def references(self) -> Tuple[str, ...]:
        """Logical ids this descriptor depends on structurally."""
        return ()

    def deferred(self) -> Tuple[Deferred, ...]:
        """Attributes of other resources this descriptor reads."""
        return ()

    @property
    def external_name(self) -> Optional[str]:
        return None

    @property
    def teardown(self) -> RemovalPolicy:
        return getattr(self, 'removal_policy', RemovalPolicy.DESTROY)


@dataclass(frozen=True)
class NetworkSpec(Descriptor):
    kind = ResourceKind.NETWORK

    cidr: str = '10.0.0.0/16'
    availability_zones: Tuple[str, ...] = ()
    max_azs: int = 2
    nat_gateways: bool = True

    @property
    def zones(self):
        return self.availability_zones[:self.max_azs]


@dataclass(frozen=True)
class BucketSpec(Descriptor):
    kind = ResourceKind.BUCKET

    versioned: bool = True
    block_public_access: bool = True
    removal_policy: RemovalPolicy = RemovalPolicy.DESTROY
    auto_delete_objects: bool = True


@dataclass(frozen=True)
class DatabaseSpec(Descriptor):
    kind = ResourceKind.DATABASE

    network_id: str = ''
    engine: str = 'postgres'
    engine_version: str = '15.5'
    instance_class: str = 'db.t3.micro'
    allocated_storage: int = 20
    multi_az: bool = False
    publicly_accessible: bool = False
    username: str = 'postgres'
    generate_credentials: bool = True
    port: int = 5432
    removal_policy: RemovalPolicy = RemovalPolicy.DESTROY
    deletion_protection: bool = False

    def references(self):
        return (self.network_id,)


@dataclass(frozen=True)
class RegistrySpec(Descriptor):
    kind = ResourceKind.REGISTRY

    repository_name: str = ''
    removal_policy: RemovalPolicy = RemovalPolicy.DESTROY

    @property
    def external_name(self):
        return self.repository_name


@dataclass(frozen=True)
class ClusterSpec(Descriptor):
    kind = ResourceKind.CLUSTER

    network_id: str = ''

    def references(self):
        return (self.network_id,)


@dataclass(frozen=True)
class RoleSpec(Descriptor):
    kind = ResourceKind.ROLE

    assumed_by: str = 'ecs-tasks.amazonaws.com'


@dataclass(frozen=True)
class ServiceSpec(Descriptor):
    kind = ResourceKind.SERVICE

    cluster_id: str = ''
    role_id: str = ''
    image: Optional[Deferred] = None
    image_tag: str = 'latest'
    container_port: int = 3000
    cpu: int = 256
    memory: int = 512
    environment: Dict[str, Deferred] = field(default_factory=dict)
    public_load_balancer: bool = True
    desired_count: int = 1

    def validate(self):
        if self.image is None:
            raise InvalidConfigurationError(f"service '{self.id}' declares no container image")

    def references(self):
        return (self.cluster_id, self.role_id)

    def deferred(self):
        refs = [self.image] if self.image else []
        return tuple(refs + list(self.environment.values()))


@dataclass(frozen=True)
class StandardAttribute:
    name: str
    required: bool = False
    mutable: bool = True


@dataclass(frozen=True)
class UserDirectorySpec(Descriptor):
    kind = ResourceKind.USER_DIRECTORY

    user_pool_name: str = ''
    self_sign_up: bool = True
    sign_in_aliases: Tuple[str, ...] = ('email',)
    standard_attributes: Tuple[StandardAttribute, ...] = ()
    removal_policy: RemovalPolicy = RemovalPolicy.DESTROY

    @property
    def external_name(self):
        return self.user_pool_name


@dataclass(frozen=True)
class UserDirectoryClientSpec(Descriptor):
    kind = ResourceKind.USER_DIRECTORY_CLIENT

    directory_id: str = ''
    generate_secret: bool = False

    def references(self):
        return (self.directory_id,)
