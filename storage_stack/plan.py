"""Declaration sequence for the storage application stack"""
import pulumi

from storage_stack.descriptors import (
    Access,
    BucketSpec,
    ClusterSpec,
    DatabaseSpec,
    Deferred,
    NetworkSpec,
    RegistrySpec,
    RoleSpec,
    ServiceSpec,
    StandardAttribute,
    UserDirectoryClientSpec,
    UserDirectorySpec,
)
from storage_stack.graph import ResourceGraph

NETWORK_ID = 'StorageAppVPC'
BUCKET_ID = 'StorageFilesBucket'
DATABASE_ID = 'StorageAppDB'
REGISTRY_ID = 'StorageAppRepo'
CLUSTER_ID = 'StorageAppCluster'
ROLE_ID = 'StorageAppTaskRole'
SERVICE_ID = 'StorageAppService'
USER_POOL_ID = 'StorageAppUserPool'
USER_POOL_CLIENT_ID = 'StorageAppUserPoolClient'

OUTPUTS = ('BucketName', 'DatabaseEndpoint', 'LoadBalancerURL', 'UserPoolId')


def build_plan(settings):
    """Declare every resource of the stack on a fresh graph and return it.

    Dependencies are always declared before their dependents. Any invalid
    reference raises a PlanError and no graph is returned.
    """
    settings.validate()
    graph = ResourceGraph()

    network = graph.declare(NetworkSpec(
        NETWORK_ID,
        cidr=settings.network.cidr,
        availability_zones=tuple(settings.network.availability_zones),
        max_azs=settings.network.max_azs,
        nat_gateways=settings.network.nat_gateways,
    ))

    bucket = graph.declare(BucketSpec(BUCKET_ID))

    database = graph.declare(DatabaseSpec(
        DATABASE_ID,
        network_id=network.id,
        engine_version=settings.database.engine_version,
        instance_class=settings.database.instance_class,
        allocated_storage=settings.database.allocated_storage,
        username=settings.database.username,
    ))

    registry = graph.declare(RegistrySpec(REGISTRY_ID, repository_name=settings.repository_name))

    cluster = graph.declare(ClusterSpec(CLUSTER_ID, network_id=network.id))

    task_role = graph.declare(RoleSpec(ROLE_ID))
    graph.grant(task_role.id, bucket.id, Access.READ, Access.WRITE)
    graph.grant(task_role.id, database.id, Access.CONNECT)

    service = graph.declare(ServiceSpec(
        SERVICE_ID,
        cluster_id=cluster.id,
        role_id=task_role.id,
        image=Deferred(registry.id, 'repository_url'),
        image_tag=settings.service.image_tag,
        container_port=settings.service.container_port,
        cpu=settings.service.cpu,
        memory=settings.service.memory,
        environment={
            'DATABASE_URL': Deferred(database.id, 'endpoint_address'),
            'S3_BUCKET': Deferred(bucket.id, 'bucket_name'),
        },
        public_load_balancer=True,
        desired_count=settings.service.desired_count,
    ))

    user_pool = graph.declare(UserDirectorySpec(
        USER_POOL_ID,
        user_pool_name=settings.user_pool_name,
        self_sign_up=True,
        sign_in_aliases=('email',),
        standard_attributes=(StandardAttribute('email', required=True, mutable=False),),
    ))
    graph.declare(UserDirectoryClientSpec(USER_POOL_CLIENT_ID, directory_id=user_pool.id, generate_secret=False))

    graph.publish('BucketName', Deferred(bucket.id, 'bucket_name'))
    graph.publish('DatabaseEndpoint', Deferred(database.id, 'endpoint_address'))
    graph.publish('LoadBalancerURL', Deferred(service.id, 'load_balancer_dns_name'))
    graph.publish('UserPoolId', Deferred(user_pool.id, 'user_pool_id'))

    pulumi.log.info(f'planned {len(graph)} resources and {len(graph.outputs)} outputs')
    return graph
