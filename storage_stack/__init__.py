"""Pulumi program for the storage application stack.

`plan` declares the resources as a typed graph without touching the cloud;
`render` turns that graph into pulumi_aws resources and stack outputs.
"""
