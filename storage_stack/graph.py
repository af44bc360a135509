"""Resource graph builder.

Nodes are descriptors kept in declaration order. Edges point from a resource
to something it needs: a structural dependency, an attribute it reads, or a
resource it was granted access to. Every edge target has to be declared before
the edge is added, so the graph is acyclic by construction.
"""
import dataclasses
from dataclasses import dataclass
from typing import Optional

import pulumi

from storage_stack.descriptors import ATTRIBUTES, GRANTABLE, Access, ResourceKind
from storage_stack.errors import (
    DanglingReferenceError,
    InvalidGrantError,
    NamingCollisionError,
    UnknownAttributeError,
)

DEPENDS_ON = 'depends_on'
READS_ATTRIBUTE = 'reads_attribute'
GRANT = 'grant'


@dataclass(frozen=True)
class Edge:
    source: str
    target: str
    kind: str
    attribute: Optional[str] = None


class ResourceGraph(object):
    def __init__(self):
        self._nodes = {}
        self._edges = []
        self._grants = {}
        self._outputs = {}
        self._external_names = {}

    def __len__(self):
        return len(self._nodes)

    def __iter__(self):
        return iter(self._nodes.values())

    def __contains__(self, resource_id):
        return resource_id in self._nodes

    @property
    def nodes(self):
        return list(self._nodes.values())

    @property
    def edges(self):
        return list(self._edges)

    @property
    def grants(self):
        return {pair: frozenset(access) for pair, access in self._grants.items()}

    @property
    def outputs(self):
        return dict(self._outputs)

    def get(self, resource_id, source=None):
        try:
            return self._nodes[resource_id]
        except KeyError:
            raise DanglingReferenceError(source or '<graph>', resource_id) from None

    def index_of(self, resource_id):
        return list(self._nodes).index(resource_id)

    def of_kind(self, kind):
        return [node for node in self._nodes.values() if node.kind == kind]

    def dependencies(self, resource_id):
        return [edge.target for edge in self._edges if edge.source == resource_id]

    def declare(self, descriptor):
        """Append a descriptor and its edges, or raise without touching the graph."""
        if descriptor.id in self._nodes:
            raise NamingCollisionError(descriptor.id)
        name = descriptor.external_name
        if name and name in self._external_names:
            raise NamingCollisionError(name, scope=f'{descriptor.kind.value} name')

        descriptor.validate()
        edges = []
        for target in descriptor.references():
            self.get(target, source=descriptor.id)
            edges.append(Edge(descriptor.id, target, DEPENDS_ON))
        for ref in descriptor.deferred():
            self._check_attribute(descriptor.id, ref)
            edges.append(Edge(descriptor.id, ref.resource_id, READS_ATTRIBUTE, ref.attribute))

        self._nodes[descriptor.id] = descriptor
        if name:
            self._external_names[name] = descriptor.id
        for edge in edges:
            self._add_edge(edge)
        pulumi.log.debug(f'declared {descriptor.kind.value} {descriptor.id}')
        return descriptor

    def grant(self, role_id, resource_id, *access):
        """Grant `access` on a resource to a role.

        Grants are additive: repeating a grant, or granting a subset of what a
        role already holds, leaves the permission set unchanged.
        """
        source = f'grant to {role_id}'
        role = self.get(role_id, source=source)
        resource = self.get(resource_id, source=source)
        if role.kind != ResourceKind.ROLE:
            raise InvalidGrantError(f"grantee '{role_id}' is a {role.kind.value}, not a role")
        if self.index_of(resource_id) > self.index_of(role_id):
            raise InvalidGrantError(f"'{resource_id}' must be declared before its grantee '{role_id}'")
        if not access:
            raise InvalidGrantError(f"grant to '{role_id}' on '{resource_id}' names no access")
        allowed = GRANTABLE.get(resource.kind, frozenset())
        levels = set()
        for a in access:
            try:
                levels.add(Access(a))
            except ValueError:
                raise InvalidGrantError(
                    f"{resource.kind.value} '{resource_id}' does not support {a} access") from None
        unsupported = sorted(a.value for a in levels - allowed)
        if unsupported:
            raise InvalidGrantError(
                f"{resource.kind.value} '{resource_id}' does not support {', '.join(unsupported)} access")

        self._grants.setdefault((role_id, resource_id), set()).update(levels)
        self._add_edge(Edge(role_id, resource_id, GRANT))
        return self.grants[(role_id, resource_id)]

    def grants_for(self, role_id):
        return {resource_id: frozenset(access)
                for (grantee, resource_id), access in self._grants.items() if grantee == role_id}

    def publish(self, label, ref):
        """Publish an attribute of a declared resource as a named stack output."""
        if label in self._outputs:
            raise NamingCollisionError(label, scope='output')
        self._check_attribute(f'output {label}', ref)
        self._outputs[label] = ref
        return ref

    def describe(self):
        """Plain structure of the whole plan, for structural comparison."""
        return {
            'nodes': [(node.kind.value, dataclasses.asdict(node)) for node in self._nodes.values()],
            'edges': [dataclasses.astuple(edge) for edge in self._edges],
            'grants': {pair: sorted(a.value for a in access) for pair, access in self._grants.items()},
            'outputs': {label: str(ref) for label, ref in self._outputs.items()},
        }

    def _check_attribute(self, source, ref):
        target = self.get(ref.resource_id, source=source)
        if ref.attribute not in ATTRIBUTES[target.kind]:
            raise UnknownAttributeError(source, ref.resource_id, ref.attribute)

    def _add_edge(self, edge):
        if edge not in self._edges:
            self._edges.append(edge)
