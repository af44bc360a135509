"""ECS cluster and the load balanced Fargate service"""
import json

import pulumi
from pulumi_aws import cloudwatch, ec2, ecs, iam, lb

from storage_stack.components import Component, resource_options
from storage_stack.components.access import assume_role_policy

EXECUTION_ROLE_POLICY_ARN = 'arn:aws:iam::aws:policy/service-role/AmazonECSTaskExecutionRolePolicy'
LISTENER_PORT = 80
LOG_RETENTION_DAYS = 30


class EcsCluster(Component):
    attributes = {'cluster_arn': 'cluster.arn'}

    def __init__(self, spec, network, protect_resources=False):
        self.network = network
        self.cluster = ecs.Cluster(
            spec.id,
            tags={'Name': spec.id},
            opts=resource_options(protect_resources, spec.teardown),
        )


class LoadBalancedFargateService(Component):
    """Fargate service in the private subnets behind an application load balancer."""
    attributes = {'load_balancer_dns_name': 'load_balancer.dns_name'}

    def __init__(self, spec, cluster, task_role, image, environment, region, protect_resources=False):
        self.spec = spec
        self.environment = environment
        network = cluster.network
        opts = resource_options(protect_resources, spec.teardown)

        self.lb_security_group = network.create_security_group(
            f'{spec.id}-lb',
            f'{spec.id} load balancer',
            ingress=[
                ec2.SecurityGroupIngressArgs(
                    protocol='tcp',
                    from_port=LISTENER_PORT,
                    to_port=LISTENER_PORT,
                    cidr_blocks=['0.0.0.0/0'],
                )
            ],
        )
        self.service_security_group = network.create_security_group(
            f'{spec.id}-task',
            f'{spec.id} tasks',
            ingress=[
                ec2.SecurityGroupIngressArgs(
                    protocol='tcp',
                    from_port=spec.container_port,
                    to_port=spec.container_port,
                    security_groups=[self.lb_security_group.id],
                )
            ],
        )

        self.load_balancer = lb.LoadBalancer(
            f'{spec.id}-lb',
            load_balancer_type='application',
            internal=not spec.public_load_balancer,
            security_groups=[self.lb_security_group.id],
            subnets=network.public_subnet_ids if spec.public_load_balancer else network.private_subnet_ids,
            tags={'Name': f'{spec.id} load balancer'},
            opts=opts,
        )
        self.target_group = lb.TargetGroup(
            f'{spec.id}-tg',
            port=spec.container_port,
            protocol='HTTP',
            target_type='ip',
            vpc_id=network.vpc.id,
            health_check=lb.TargetGroupHealthCheckArgs(path='/', matcher='200'),
            opts=opts,
        )
        self.listener = lb.Listener(
            f'{spec.id}-listener',
            load_balancer_arn=self.load_balancer.arn,
            port=LISTENER_PORT,
            protocol='HTTP',
            default_actions=[
                lb.ListenerDefaultActionArgs(type='forward', target_group_arn=self.target_group.arn)
            ],
            opts=opts,
        )

        self.log_group = cloudwatch.LogGroup(
            f'{spec.id}-logs',
            retention_in_days=LOG_RETENTION_DAYS,
            opts=opts,
        )
        self.execution_role = iam.Role(
            f'{spec.id}-execution-role',
            assume_role_policy=assume_role_policy('ecs-tasks.amazonaws.com'),
            opts=opts,
        )
        iam.RolePolicyAttachment(
            f'{spec.id}-execution-role-policy',
            role=self.execution_role.name,
            policy_arn=EXECUTION_ROLE_POLICY_ARN,
            opts=opts,
        )

        self.image = pulumi.Output.concat(image, ':', spec.image_tag)
        names = sorted(environment)
        self.container_definitions = pulumi.Output.all(
            self.image, self.log_group.name, *[environment[name] for name in names]
        ).apply(lambda args: self._container_definitions(args[0], args[1], dict(zip(names, args[2:])), region))

        self.task_definition = ecs.TaskDefinition(
            f'{spec.id}-task',
            family=spec.id,
            cpu=str(spec.cpu),
            memory=str(spec.memory),
            network_mode='awsvpc',
            requires_compatibilities=['FARGATE'],
            execution_role_arn=self.execution_role.arn,
            task_role_arn=task_role.role.arn,
            container_definitions=self.container_definitions,
            opts=opts,
        )
        self.service = ecs.Service(
            spec.id,
            cluster=cluster.cluster.arn,
            task_definition=self.task_definition.arn,
            desired_count=spec.desired_count,
            launch_type='FARGATE',
            network_configuration=ecs.ServiceNetworkConfigurationArgs(
                subnets=network.private_subnet_ids,
                security_groups=[self.service_security_group.id],
                assign_public_ip=False,
            ),
            load_balancers=[
                ecs.ServiceLoadBalancerArgs(
                    target_group_arn=self.target_group.arn,
                    container_name=spec.id,
                    container_port=spec.container_port,
                )
            ],
            opts=resource_options(
                protect_resources, spec.teardown, depends_on=[self.listener] + task_role.policies),
        )

    def _container_definitions(self, image, log_group_name, environment, region):
        return json.dumps([
            {
                'name': self.spec.id,
                'image': image,
                'essential': True,
                'portMappings': [
                    {'containerPort': self.spec.container_port, 'protocol': 'tcp'}
                ],
                'environment': [
                    {'name': name, 'value': value} for name, value in environment.items()
                ],
                'logConfiguration': {
                    'logDriver': 'awslogs',
                    'options': {
                        'awslogs-group': log_group_name,
                        'awslogs-region': region,
                        'awslogs-stream-prefix': self.spec.id,
                    },
                },
            }
        ])
