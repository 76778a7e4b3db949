"""Connector entity catalogue.

Each entity bundles table schemas, extraction functions and section metadata
and is documented through :func:`document_entity`.
"""

from .base import (
    CONNECTOR_PATH,
    Entity,
    connector_guid,
    diff_entity,
    document_entity,
    find_connector,
)
from .connector import (
    attribute_type_label,
    connector_properties,
    provisioning_hierarchy,
    selected_attributes,
    selected_object_types,
)
from .run_profiles import ordered_run_profile_names, run_profile, run_profile_names
from .sync_rules import sync_rule

__all__ = [
    "CONNECTOR_PATH",
    "Entity",
    "attribute_type_label",
    "connector_guid",
    "connector_properties",
    "diff_entity",
    "document_entity",
    "find_connector",
    "ordered_run_profile_names",
    "provisioning_hierarchy",
    "run_profile",
    "run_profile_names",
    "selected_attributes",
    "selected_object_types",
    "sync_rule",
]
