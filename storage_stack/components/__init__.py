"""Pulumi renderings of the stack descriptors"""
import operator

import pulumi

from storage_stack.descriptors import RemovalPolicy


class Component(object):
    """A rendered descriptor.

    `attributes` maps each attribute the descriptor kind exposes to the dotted
    path of the Pulumi output on the component.
    """
    attributes = {}

    def attribute(self, name):
        return operator.attrgetter(self.attributes[name])(self)


def resource_options(protect=False, removal_policy=RemovalPolicy.DESTROY, **kwargs):
    return pulumi.ResourceOptions(
        protect=protect,
        retain_on_delete=removal_policy == RemovalPolicy.RETAIN,
        **kwargs
    )
