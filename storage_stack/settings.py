"""Stack configuration"""
from dataclasses import dataclass, field, fields
from typing import Dict, Tuple

import pulumi

from storage_stack.errors import InvalidConfigurationError

MIN_AVAILABILITY_ZONES = 2


@dataclass(frozen=True)
class NetworkSettings:
    cidr: str = '10.0.0.0/16'
    availability_zones: Tuple[str, ...] = ('us-east-1a', 'us-east-1b')
    max_azs: int = 2
    nat_gateways: bool = True


@dataclass(frozen=True)
class DatabaseSettings:
    engine_version: str = '15.5'
    instance_class: str = 'db.t3.micro'
    allocated_storage: int = 20
    username: str = 'postgres'


@dataclass(frozen=True)
class ServiceSettings:
    container_port: int = 3000
    desired_count: int = 1
    image_tag: str = 'latest'
    cpu: int = 256
    memory: int = 512


@dataclass(frozen=True)
class StackSettings:
    environment: str = 'dev'
    region: str = 'us-east-1'
    protect_resources: bool = False
    repository_name: str = 'storage-app'
    user_pool_name: str = 'StorageAppUsers'
    network: NetworkSettings = field(default_factory=NetworkSettings)
    database: DatabaseSettings = field(default_factory=DatabaseSettings)
    service: ServiceSettings = field(default_factory=ServiceSettings)
    tags: Dict[str, str] = field(default_factory=dict)

    def validate(self):
        zones = self.network.availability_zones[:self.network.max_azs]
        if len(set(zones)) < MIN_AVAILABILITY_ZONES:
            raise InvalidConfigurationError(
                f'network needs at least {MIN_AVAILABILITY_ZONES} distinct availability zones, got {list(zones)}')
        if not 0 < self.service.container_port < 65536:
            raise InvalidConfigurationError(f'container port {self.service.container_port} is out of range')
        if self.service.desired_count < 1:
            raise InvalidConfigurationError('service desired count must be at least 1')
        if self.database.allocated_storage < 20:
            raise InvalidConfigurationError('database storage must be at least 20 GiB')
        return self


def _section(cls, values):
    values = dict(values or {})
    unknown = set(values) - {f.name for f in fields(cls)}
    if unknown:
        raise InvalidConfigurationError(f'unknown {cls.__name__} keys: {", ".join(sorted(unknown))}')
    if 'availability_zones' in values:
        values['availability_zones'] = tuple(values['availability_zones'])
    return cls(**values)


def load_settings(config=None, aws_config=None):
    """Read the stack configuration into a validated StackSettings."""
    config = config or pulumi.Config()
    aws_config = aws_config or pulumi.Config('aws')
    defaults = StackSettings()

    settings = StackSettings(
        environment=config.get('environment') or pulumi.get_stack(),
        region=aws_config.get('region') or defaults.region,
        protect_resources=bool(config.get_bool('protect_resources')),
        repository_name=config.get('repository_name') or defaults.repository_name,
        user_pool_name=config.get('user_pool_name') or defaults.user_pool_name,
        network=_section(NetworkSettings, config.get_object('network')),
        database=_section(DatabaseSettings, config.get_object('database')),
        service=_section(ServiceSettings, config.get_object('service')),
        tags=dict(config.get_object('tags') or {}),
    )
    return settings.validate()
