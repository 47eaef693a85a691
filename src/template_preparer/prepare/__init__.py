"""Template preparers."""

from template_preparer.prepare.bitbucket import BitbucketPreparer
from template_preparer.prepare.types import PreparerBase, PreparerOptions

__all__ = ["BitbucketPreparer", "PreparerBase", "PreparerOptions"]
