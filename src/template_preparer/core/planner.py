"""Checkout planning: temporary root allocation and subdirectory resolution."""

import posixpath
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from anyio import to_thread

from template_preparer.errors import AllocationError, ConfigurationError
from template_preparer.utils.paths import is_within


@dataclass(frozen=True)
class CheckoutPlan:
    """Where a template will be cloned and where its files will be read from.

    Attributes:
        temp_root: Freshly allocated directory the repository is cloned into
        checkout_path: Directory inside ``temp_root`` holding the template
    """

    temp_root: Path
    checkout_path: Path


def template_subdirectory(repository_filepath: str, template_path: Optional[str] = None) -> str:
    """Directory of the referenced file joined with the template's own path.

    Args:
        repository_filepath: Path of the referenced file inside the repository
        template_path: The template's ``spec.path`` (defaults to ``.``)

    Returns:
        Relative POSIX path of the template directory in the checkout

    Raises:
        ConfigurationError: If the result would leave the repository root
    """
    subdir = posixpath.join(posixpath.dirname(repository_filepath), template_path or ".")
    normalized = posixpath.normpath(subdir)
    if posixpath.isabs(normalized) or normalized == ".." or normalized.startswith("../"):
        raise ConfigurationError(
            f"Template path '{template_path}' resolves outside of the repository checkout"
        )
    return subdir


async def allocate_temp_root(template_name: str, working_directory: Path) -> Path:
    """Atomically create a uniquely named directory for a checkout.

    The directory name starts with the template name followed by a random
    suffix; creation retries on collision, so concurrent calls for the same
    template never share a directory.

    Raises:
        AllocationError: If the directory cannot be created
    """
    try:
        created = await to_thread.run_sync(
            lambda: tempfile.mkdtemp(prefix=template_name, dir=str(working_directory))
        )
    except OSError as e:
        raise AllocationError(
            f"Failed to create checkout directory for {template_name} in {working_directory}: {e}"
        ) from e
    return Path(created).resolve()


async def plan_checkout(
    template_name: str,
    repository_filepath: str,
    template_path: Optional[str],
    working_directory: Path,
) -> CheckoutPlan:
    """Allocate the temporary root and resolve the checkout directory in it.

    Raises:
        ConfigurationError: If the checkout directory escapes the temporary root
        AllocationError: If the temporary root cannot be created
    """
    subdir = template_subdirectory(repository_filepath, template_path)
    temp_root = await allocate_temp_root(template_name, working_directory)

    checkout_path = (temp_root / subdir).resolve()
    if not is_within(checkout_path, temp_root):
        raise ConfigurationError(
            f"Checkout path {checkout_path} is outside of {temp_root}"
        )

    return CheckoutPlan(temp_root=temp_root, checkout_path=checkout_path)
