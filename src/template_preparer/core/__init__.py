"""Core template, location and checkout planning models."""

from template_preparer.core.credentials import Credentials, CredentialMode, select_credentials
from template_preparer.core.location import ResolvedLocation, parse_location_annotation
from template_preparer.core.planner import CheckoutPlan, plan_checkout
from template_preparer.core.reference import RepositoryReference, parse_repository_reference
from template_preparer.core.template import TemplateDescriptor

__all__ = [
    "CheckoutPlan",
    "CredentialMode",
    "Credentials",
    "RepositoryReference",
    "ResolvedLocation",
    "TemplateDescriptor",
    "parse_location_annotation",
    "parse_repository_reference",
    "plan_checkout",
    "select_credentials",
]
