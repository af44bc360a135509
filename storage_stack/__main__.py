"""Storage application stack: network, bucket, database, container service and user pool"""
import pulumi

from storage_stack.plan import build_plan
from storage_stack.render import create_stack
from storage_stack.settings import load_settings
from storage_stack.utils.autotag import register_auto_tags

settings = load_settings()

# Automatically inject tags.
register_auto_tags({
    'source': 'pulumi',
    'pulumi:Project': pulumi.get_project(),
    'pulumi:Stack': pulumi.get_stack(),
    'environment': settings.environment,
    **settings.tags,
})

create_stack(build_plan(settings), settings)
