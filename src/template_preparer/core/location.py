"""Location annotation parsing and protocol validation."""

from dataclasses import dataclass
from typing import Iterable

from template_preparer.core.template import LOCATION_ANNOTATION, TemplateDescriptor
from template_preparer.errors import ConfigurationError


@dataclass(frozen=True)
class ResolvedLocation:
    """A location annotation split into protocol and target."""

    protocol: str
    location: str


def parse_location_annotation(template: TemplateDescriptor) -> ResolvedLocation:
    """Split a template's location annotation into protocol and target.

    The annotation has the form ``<protocol>:<target>``. Only the first colon
    separates the two, so targets such as ``https://...`` stay intact.

    Args:
        template: Template carrying the location annotation

    Returns:
        ResolvedLocation with protocol and target

    Raises:
        ConfigurationError: If the annotation is missing or malformed
    """
    annotation = template.location
    if not annotation:
        raise ConfigurationError(
            f"No location annotation provided in template {template.name}"
        )

    protocol, sep, location = annotation.partition(":")
    if not sep or not protocol or not location:
        raise ConfigurationError(
            f"Failure parsing location annotation '{LOCATION_ANNOTATION}' "
            f"of template {template.name}: {annotation}"
        )

    return ResolvedLocation(protocol=protocol, location=location)


def resolve_location(
    template: TemplateDescriptor,
    supported_protocols: Iterable[str],
    parser=parse_location_annotation,
) -> ResolvedLocation:
    """Extract the template location and check its protocol is supported.

    Raises:
        ConfigurationError: If the protocol is not in ``supported_protocols``
    """
    resolved = parser(template)
    supported = tuple(supported_protocols)
    if resolved.protocol not in supported:
        expected = ", ".join(f"'{p}'" for p in supported)
        raise ConfigurationError(
            f"Wrong location protocol: {resolved.protocol}, should be one of {expected}"
        )
    return resolved
