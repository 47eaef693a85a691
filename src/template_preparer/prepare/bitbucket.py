"""Bitbucket template preparer."""

from pathlib import Path
from typing import Callable, Optional

from template_preparer.config.schema import BitbucketIntegrationConfig
from template_preparer.core.credentials import Credentials, select_credentials
from template_preparer.core.location import (
    ResolvedLocation,
    parse_location_annotation,
    resolve_location,
)
from template_preparer.core.planner import plan_checkout
from template_preparer.core.reference import RepositoryReference, parse_repository_reference
from template_preparer.core.template import TemplateDescriptor
from template_preparer.errors import ConfigurationError
from template_preparer.fetch.git import GitCloner
from template_preparer.fetch.protocols import RepositoryCloner
from template_preparer.prepare.types import PreparerBase, PreparerOptions
from template_preparer.utils.paths import is_within


class BitbucketPreparer(PreparerBase):
    """Checks out templates hosted on Bitbucket.

    Resolves the template location, allocates a unique checkout directory,
    picks credentials and clones the repository over HTTPS. Errors from any
    step propagate to the caller; a partially populated checkout directory
    is left in place.

    The repository is cloned at its default branch. A branch or tag in the
    location URL only serves to locate the template file in the tree.
    """

    SUPPORTED_PROTOCOLS = ("bitbucket", "url")
    TRANSPORT_SCHEME = "https"

    def __init__(
        self,
        username: Optional[str] = None,
        token: Optional[str] = None,
        app_password: Optional[str] = None,
        *,
        cloner: Optional[RepositoryCloner] = None,
        annotation_parser: Callable[[TemplateDescriptor], ResolvedLocation] = parse_location_annotation,
        reference_parser: Callable[[str], RepositoryReference] = parse_repository_reference,
    ):
        """Initialize Bitbucket preparer.

        Args:
            username: Bitbucket user name, used with an app password
            token: Access token, used when no username/app password pair is set
            app_password: Bitbucket app password
            cloner: Clone primitive (defaults to GitCloner)
            annotation_parser: Splits the location annotation of a template
            reference_parser: Parses the remote repository reference
        """
        self.username = username
        self.token = token
        self.app_password = app_password
        self.cloner = cloner if cloner is not None else GitCloner()
        self.annotation_parser = annotation_parser
        self.reference_parser = reference_parser

    @classmethod
    def from_config(
        cls,
        config: BitbucketIntegrationConfig,
        cloner: Optional[RepositoryCloner] = None,
    ) -> "BitbucketPreparer":
        """Create a preparer from a Bitbucket integration config."""
        return cls(
            username=config.username,
            token=config.token,
            app_password=config.app_password,
            cloner=cloner,
        )

    def get_credentials(self) -> Optional[Credentials]:
        return select_credentials(self.username, self.token, self.app_password)

    async def prepare(self, template: TemplateDescriptor, opts: PreparerOptions) -> Path:
        """Clone the template repository and return the template directory.

        Args:
            template: Template to prepare
            opts: Working directory and logger for this invocation

        Returns:
            Absolute path of the template directory inside the fresh checkout

        Raises:
            ConfigurationError: If the location is unsupported or escapes the checkout
            AllocationError: If the checkout directory cannot be created
            FetchError: If the clone fails
        """
        logger = opts.logger

        resolved = resolve_location(
            template, self.SUPPORTED_PROTOCOLS, parser=self.annotation_parser
        )
        repo = self.reference_parser(resolved.location)
        checkout_url = repo.to_transport_url(self.TRANSPORT_SCHEME)

        plan = await plan_checkout(
            template_name=template.name,
            repository_filepath=repo.filepath,
            template_path=template.path,
            working_directory=opts.working_directory,
        )
        logger.debug(
            "Resolved template %s to %s, checkout in %s",
            template.name,
            checkout_url,
            plan.checkout_path,
        )

        await self.cloner.clone(
            url=checkout_url,
            target_directory=plan.temp_root,
            credentials=self.get_credentials(),
            logger=logger,
        )

        # Symlinks in the cloned tree may point outside the checkout
        if not is_within(plan.checkout_path, plan.temp_root):
            raise ConfigurationError(
                f"Template directory {plan.checkout_path} resolves outside of {plan.temp_root}"
            )

        return plan.checkout_path
