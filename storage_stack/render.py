"""Render a resource plan as Pulumi resources"""
import pulumi
import pulumi_aws as aws

from storage_stack.components.access import TaskRole, grant_statements
from storage_stack.components.auth import UserDirectory, UserDirectoryClient
from storage_stack.components.database import Database
from storage_stack.components.service import EcsCluster, LoadBalancedFargateService
from storage_stack.components.storage import ImageRegistry, StorageBucket
from storage_stack.descriptors import ResourceKind
from storage_stack.errors import DanglingReferenceError
from storage_stack.vpc import create_network


class Renderer(object):
    """Walks the plan in declaration order, creating each resource once.

    Deferred references become the Pulumi outputs of already rendered
    resources, so their values are only known while the engine provisions.
    """

    def __init__(self, graph, settings):
        self.graph = graph
        self.settings = settings
        self.protect = settings.protect_resources
        self.rendered = {}
        self.outputs = {}
        self._granted = set()
        self._account_id = None
        self._handlers = {
            ResourceKind.NETWORK: lambda spec: create_network(spec, settings),
            ResourceKind.BUCKET: lambda spec: StorageBucket(spec, self.protect),
            ResourceKind.DATABASE: lambda spec: Database(spec, self.rendered[spec.network_id], self.protect),
            ResourceKind.REGISTRY: lambda spec: ImageRegistry(spec, self.protect),
            ResourceKind.CLUSTER: lambda spec: EcsCluster(spec, self.rendered[spec.network_id], self.protect),
            ResourceKind.ROLE: lambda spec: TaskRole(spec, self.protect),
            ResourceKind.SERVICE: self._service,
            ResourceKind.USER_DIRECTORY: lambda spec: UserDirectory(spec, self.protect),
            ResourceKind.USER_DIRECTORY_CLIENT:
                lambda spec: UserDirectoryClient(spec, self.rendered[spec.directory_id], self.protect),
        }

    @property
    def account_id(self):
        if self._account_id is None:
            self._account_id = aws.get_caller_identity_output().account_id
        return self._account_id

    def resolve(self, ref):
        try:
            component = self.rendered[ref.resource_id]
        except KeyError:
            raise DanglingReferenceError(str(ref), ref.resource_id) from None
        return component.attribute(ref.attribute)

    def render(self):
        for spec in self.graph:
            self.rendered[spec.id] = self._handlers[spec.kind](spec)
            pulumi.log.debug(f'rendered {spec.kind.value} {spec.id}')
            self._render_grants()
        self.outputs = {label: self.resolve(ref) for label, ref in self.graph.outputs.items()}
        return self.outputs

    def _render_grants(self):
        for (role_id, resource_id), access in self.graph.grants.items():
            pair = (role_id, resource_id)
            if pair in self._granted or role_id not in self.rendered or resource_id not in self.rendered:
                continue
            statements = grant_statements(
                self.graph.get(resource_id).kind,
                self.rendered[resource_id],
                access,
                region=self.settings.region,
                account_id=self.account_id,
            )
            self.rendered[role_id].attach_grant(resource_id, statements)
            self._granted.add(pair)

    def _service(self, spec):
        return LoadBalancedFargateService(
            spec,
            cluster=self.rendered[spec.cluster_id],
            task_role=self.rendered[spec.role_id],
            image=self.resolve(spec.image),
            environment={name: self.resolve(ref) for name, ref in spec.environment.items()},
            region=self.settings.region,
            protect_resources=self.protect,
        )


def create_stack(graph, settings):
    """Render the plan and export its published outputs."""
    renderer = Renderer(graph, settings)
    outputs = renderer.render()
    for label, value in outputs.items():
        pulumi.export(label, value)
    return renderer
