"""Tests for the Bitbucket preparer."""

import posixpath

import anyio
import pytest

from template_preparer.config.schema import BitbucketIntegrationConfig
from template_preparer.core.credentials import Credentials
from template_preparer.core.location import ResolvedLocation
from template_preparer.core.reference import parse_repository_reference
from template_preparer.errors import ConfigurationError, FetchError
from template_preparer.prepare.bitbucket import BitbucketPreparer
from template_preparer.prepare.types import PreparerBase


class TestFromConfig:
    """Test building a preparer from integration config."""

    def test_from_config(self, fake_cloner):
        """Test that the identity fields are carried over."""
        config = BitbucketIntegrationConfig(username="u", token="t", appPassword="p")

        preparer = BitbucketPreparer.from_config(config, cloner=fake_cloner)
        assert preparer.username == "u"
        assert preparer.token == "t"
        assert preparer.app_password == "p"
        assert preparer.cloner is fake_cloner

    def test_default_cloner(self):
        """Test that a GitCloner is used when none is given."""
        from template_preparer.fetch.git import GitCloner

        preparer = BitbucketPreparer.from_config(BitbucketIntegrationConfig())
        assert isinstance(preparer.cloner, GitCloner)


@pytest.mark.anyio
class TestPrepare:
    """Test BitbucketPreparer.prepare."""

    async def test_returns_template_directory(
        self, fake_cloner, make_template, preparer_options, bitbucket_location
    ):
        """Test that the file's directory inside the checkout is returned."""
        preparer = BitbucketPreparer(cloner=fake_cloner)

        checkout = await preparer.prepare(make_template(), preparer_options)

        call = fake_cloner.calls[0]
        temp_root = call["target_directory"]
        remote_path = parse_repository_reference(bitbucket_location[len("url:"):]).filepath
        assert checkout == (temp_root / posixpath.dirname(remote_path)).resolve()
        assert (checkout / "template.yaml").exists()
        assert temp_root.parent == preparer_options.working_directory.resolve()
        assert temp_root.name.startswith("my-template")

    async def test_clones_transport_url(self, fake_cloner, make_template, preparer_options):
        """Test that the HTTPS repository URL is cloned, not the browse URL."""
        preparer = BitbucketPreparer(cloner=fake_cloner)

        await preparer.prepare(make_template(), preparer_options)

        assert fake_cloner.calls[0]["url"] == "https://bitbucket.org/my-workspace/templates"

    async def test_template_path_joined(self, fake_cloner, make_template, preparer_options):
        """Test that spec.path is joined onto the file's directory."""
        preparer = BitbucketPreparer(cloner=fake_cloner)

        checkout = await preparer.prepare(make_template(path="skeleton"), preparer_options)

        temp_root = fake_cloner.calls[0]["target_directory"]
        assert checkout == temp_root / "react-app" / "skeleton"

    @pytest.mark.parametrize(
        "username,token,app_password,expected",
        [
            ("u", None, "p", Credentials("u", "p")),
            (None, "t", None, Credentials("x-token-auth", "t")),
            (None, None, None, None),
        ],
    )
    async def test_credentials_passed_to_cloner(
        self, fake_cloner, make_template, preparer_options, username, token, app_password, expected
    ):
        """Test that the selected credentials reach the clone primitive."""
        preparer = BitbucketPreparer(username, token, app_password, cloner=fake_cloner)

        await preparer.prepare(make_template(), preparer_options)

        assert fake_cloner.calls[0]["credentials"] == expected

    async def test_bitbucket_protocol(self, fake_cloner, make_template, preparer_options):
        """Test that the bitbucket protocol is accepted."""
        template = make_template(
            location="bitbucket:https://bitbucket.org/my-workspace/templates/src/main/template.yaml"
        )
        preparer = BitbucketPreparer(cloner=fake_cloner)

        checkout = await preparer.prepare(template, preparer_options)
        assert checkout == fake_cloner.calls[0]["target_directory"]

    async def test_unsupported_protocol(self, fake_cloner, make_template, preparer_options):
        """Test that other protocols fail before any I/O."""
        template = make_template(location="github:https://github.com/o/r/blob/main/t.yaml")
        preparer = BitbucketPreparer(cloner=fake_cloner)

        with pytest.raises(ConfigurationError, match="github"):
            await preparer.prepare(template, preparer_options)

        assert fake_cloner.calls == []
        assert list(preparer_options.working_directory.iterdir()) == []

    async def test_escaping_path_rejected(self, fake_cloner, make_template, preparer_options):
        """Test that a template path leaving the checkout is rejected."""
        preparer = BitbucketPreparer(cloner=fake_cloner)

        with pytest.raises(ConfigurationError):
            await preparer.prepare(make_template(path="../../../etc"), preparer_options)

        assert fake_cloner.calls == []

    async def test_fetch_error_propagates(self, make_template, preparer_options, make_cloner):
        """Test that a clone failure propagates unchanged."""
        error = FetchError("authentication failed for bitbucket.org")
        preparer = BitbucketPreparer(cloner=make_cloner(error=error))

        with pytest.raises(FetchError) as exc_info:
            await preparer.prepare(make_template(), preparer_options)

        assert exc_info.value is error
        assert str(exc_info.value) == "authentication failed for bitbucket.org"

    async def test_temp_root_left_on_failure(self, make_template, preparer_options, make_cloner):
        """Test that a failed fetch leaves its directory for the caller."""
        cloner = make_cloner(error=FetchError("boom"))
        preparer = BitbucketPreparer(cloner=cloner)

        with pytest.raises(FetchError):
            await preparer.prepare(make_template(), preparer_options)

        assert cloner.calls[0]["target_directory"].is_dir()

    async def test_concurrent_same_name(self, make_template, preparer_options, make_cloner):
        """Test that concurrent preparations of one template do not collide."""
        cloner = make_cloner()
        preparer = BitbucketPreparer(cloner=cloner)
        results = []

        async def run():
            results.append(await preparer.prepare(make_template(), preparer_options))

        async with anyio.create_task_group() as tg:
            for _ in range(5):
                tg.start_soon(run)

        temp_roots = {call["target_directory"] for call in cloner.calls}
        assert len(temp_roots) == 5
        assert len(set(results)) == 5

    async def test_injected_parsers(self, fake_cloner, make_template, preparer_options):
        """Test that annotation and reference parsers can be substituted."""
        preparer = BitbucketPreparer(
            cloner=fake_cloner,
            annotation_parser=lambda t: ResolvedLocation(
                "url", "https://bitbucket.org/ws/other/src/main/nested/dir/template.yaml"
            ),
        )

        checkout = await preparer.prepare(make_template(location=None), preparer_options)

        assert fake_cloner.calls[0]["url"] == "https://bitbucket.org/ws/other"
        assert checkout == fake_cloner.calls[0]["target_directory"] / "nested" / "dir"

    async def test_symlink_escape_rejected(self, make_template, preparer_options, make_cloner, tmp_path):
        """Test that a template directory symlinked outside the checkout is rejected."""
        outside = tmp_path / "outside"
        outside.mkdir()
        cloner = make_cloner(files={}, symlinks={"react-app": outside})
        preparer = BitbucketPreparer(cloner=cloner)

        with pytest.raises(ConfigurationError, match="outside"):
            await preparer.prepare(make_template(), preparer_options)

    async def test_symlink_inside_checkout_allowed(self, make_template, preparer_options, make_cloner):
        """Test that a symlink to another directory of the checkout is followed."""
        cloner = make_cloner(
            files={"shared/template.yaml": "kind: Template\n"},
            symlinks={"react-app": "shared"},
        )
        preparer = BitbucketPreparer(cloner=cloner)

        checkout = await preparer.prepare(make_template(), preparer_options)

        assert (checkout / "template.yaml").exists()


class TestPreparerBase:
    """Test the preparer interface declaration."""

    def test_bitbucket_preparer_declares_interface(self):
        """Test that BitbucketPreparer declares the PreparerBase interface."""
        assert PreparerBase in BitbucketPreparer.__mro__
