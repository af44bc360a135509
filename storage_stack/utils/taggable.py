"""Resource types that accept a `tags` property"""

TAGGABLE_RESOURCE_TYPES = frozenset([
    'aws:cloudwatch/logGroup:LogGroup',
    'aws:cognito/userPool:UserPool',
    'aws:ec2/eip:Eip',
    'aws:ec2/internetGateway:InternetGateway',
    'aws:ec2/natGateway:NatGateway',
    'aws:ec2/routeTable:RouteTable',
    'aws:ec2/securityGroup:SecurityGroup',
    'aws:ec2/subnet:Subnet',
    'aws:ec2/vpc:Vpc',
    'aws:ecr/repository:Repository',
    'aws:ecs/cluster:Cluster',
    'aws:ecs/service:Service',
    'aws:ecs/taskDefinition:TaskDefinition',
    'aws:iam/role:Role',
    'aws:lb/listener:Listener',
    'aws:lb/loadBalancer:LoadBalancer',
    'aws:lb/targetGroup:TargetGroup',
    'aws:rds/instance:Instance',
    'aws:rds/subnetGroup:SubnetGroup',
    'aws:s3/bucketV2:BucketV2',
])


def is_taggable(t):
    return t in TAGGABLE_RESOURCE_TYPES
