"""Tests for the sandboxed filesystem functions."""

import os

import pytest
from stylepath.errors import SecurityViolationError
from stylepath.errors import TypeMismatchError
from stylepath.errors import UnderlyingIOError
from stylepath.functions import FsFunctions
from stylepath.functions.values import FALSE
from stylepath.functions.values import TRUE
from stylepath.functions.values import SassError
from stylepath.functions.values import SassList
from stylepath.functions.values import SassMap
from stylepath.functions.values import SassNumber
from stylepath.functions.values import SassString
from stylepath.functions.values import to_python
from stylepath.importers import ImportSession
from stylepath.importers import create_importer
from stylepath.settings import ResolverSettings


@pytest.fixture
def site(tmp_path):
    """tmp/site/{a.png, b.css, sub/, nested/c.png} plus tmp/secret.txt outside the root."""
    root = tmp_path / "site"
    (root / "sub").mkdir(parents=True)
    (root / "nested").mkdir()
    (root / "a.png").write_bytes(b"png")
    (root / "b.css").write_text("b {}")
    (root / "nested" / "c.png").write_bytes(b"png")
    (tmp_path / "secret.txt").write_text("secret")
    return root


@pytest.fixture
def functions(site):
    settings = ResolverSettings(root=site, fs_sandbox=True)
    return FsFunctions(settings, ImportSession())


def _s(value: str) -> SassString:
    return SassString(value)


class TestSandbox:
    @pytest.mark.asyncio
    async def test_exists_inside_root(self, functions, site):
        assert await functions.exists(_s(str(site / "a.png"))) == TRUE
        assert await functions.exists(_s(str(site / "missing.png"))) == FALSE

    @pytest.mark.asyncio
    async def test_exists_outside_root_is_a_violation(self, functions, site):
        outside = str(site.parent / "secret.txt")

        result = await functions.exists(_s(outside))

        assert isinstance(result, SassError)
        assert result.message == f"Security violation: Cannot access {outside}"
        assert isinstance(result.error, SecurityViolationError)

    @pytest.mark.asyncio
    async def test_list_files_escaping_glob_names_offending_entry(self, functions, site):
        result = await functions.list_files(_s(str(site)), _s("../*"))

        assert isinstance(result, SassError)
        assert result.message == f"Security violation: Cannot access {os.path.join('..', 'secret.txt')}"

    @pytest.mark.asyncio
    async def test_list_files_outside_directory_is_a_violation(self, functions, site):
        result = await functions.list_files(_s(str(site.parent)))

        assert isinstance(result, SassError)
        assert str(site.parent) in result.message

    @pytest.mark.asyncio
    async def test_read_file_outside_root(self, functions, site):
        result = await functions.read_file(_s(str(site / ".." / "secret.txt")))

        assert isinstance(result, SassError)
        assert result.message.startswith("Security violation")

    @pytest.mark.asyncio
    async def test_unrestricted_sandbox(self, site):
        functions = FsFunctions(ResolverSettings(root=site), ImportSession())

        assert await functions.exists(_s(str(site.parent / "secret.txt"))) == TRUE

    @pytest.mark.asyncio
    async def test_explicit_sandbox_roots(self, site):
        settings = ResolverSettings(root=site.parent, fs_sandbox=[site.name])
        functions = FsFunctions(settings, ImportSession())

        assert functions.in_sandbox(str(site / "a.png"))
        assert not functions.in_sandbox(str(site.parent / "secret.txt"))


class TestListing:
    @pytest.mark.asyncio
    async def test_list_files(self, functions, site):
        result = await functions.list_files(_s(str(site)))

        assert to_python(result) == ["a.png", "b.css"]

    @pytest.mark.asyncio
    async def test_list_files_with_glob(self, functions, site):
        result = await functions.list_files(_s(str(site)), _s("**/*.png"))

        assert to_python(result) == [os.path.join("nested", "c.png")]

    @pytest.mark.asyncio
    async def test_list_directories(self, functions, site):
        result = await functions.list_directories(_s(str(site)))

        assert isinstance(result, SassList)
        assert to_python(result) == ["nested", "sub"]


class TestPaths:
    @pytest.mark.asyncio
    async def test_join(self, functions):
        result = await functions.join(_s("a"), _s("b"), _s("../c.png"))

        assert result == _s(os.path.join("a", "c.png"))

    @pytest.mark.asyncio
    async def test_path_separator(self, functions):
        assert await functions.path_separator() == _s(os.sep)

    @pytest.mark.asyncio
    async def test_parse_filename(self, functions):
        result = await functions.parse_filename(_s("/images/logo.png"))

        assert to_python(result) == {
            "base": "logo.png",
            "dir": "/images",
            "name": "logo",
            "ext": ".png",
            "is-absolute": True,
        }

    @pytest.mark.asyncio
    async def test_absolute_path_from_session_registration(self, site):
        session = ImportSession()
        session.register_path("images", str(site / "nested"))
        functions = FsFunctions(ResolverSettings(root=site), session)

        result = await functions.absolute_path(_s("images"), _s("c.png"))

        assert result == _s(str(site / "nested" / "c.png"))

    @pytest.mark.asyncio
    async def test_absolute_path_falls_back_to_registered_map(self, functions, site):
        registered = SassMap(((_s("images"), _s(str(site / "sub"))),))

        result = await functions.absolute_path(_s("images"), _s("x.png"), registered=registered)

        assert result == _s(str(site / "sub" / "x.png"))

    @pytest.mark.asyncio
    async def test_absolute_path_session_binding_beats_registered_map(self, site):
        session = ImportSession()
        session.register_path("images", str(site / "nested"))
        functions = FsFunctions(ResolverSettings(root=site), session)
        stale = SassMap(((_s("images"), _s(str(site / "sub"))),))

        result = await functions.absolute_path(_s("images"), _s("c.png"), registered=stale)

        assert result == _s(str(site / "nested" / "c.png"))

    @pytest.mark.asyncio
    async def test_absolute_path_unknown_token(self, functions):
        result = await functions.absolute_path(_s("nope"))

        assert result == SassError("No path is registered for nope")


class TestFiles:
    @pytest.mark.asyncio
    async def test_info(self, functions, site):
        result = to_python(await functions.info(_s(str(site / "b.css"))))

        assert result["is-file"] is True
        assert result["is-directory"] is False
        assert result["size"] == 4
        assert result["real-path"] == os.path.realpath(site / "b.css")
        assert result["modification-time"] > 0

    @pytest.mark.asyncio
    async def test_read_file(self, functions, site):
        assert await functions.read_file(_s(str(site / "b.css"))) == _s("b {}")

    @pytest.mark.asyncio
    async def test_read_missing_file_is_an_error_value(self, functions, site):
        result = await functions.read_file(_s(str(site / "nope.css")))

        assert isinstance(result, SassError)
        assert "nope.css" in result.message

    @pytest.mark.asyncio
    async def test_read_binary_file_is_an_error_value(self, functions, site):
        image = site / "img.png"
        image.write_bytes(b"\x89PNG\xff\xfe\x00")

        result = await functions.read_file(_s(str(image)))

        assert isinstance(result, SassError)
        assert isinstance(result.error, UnderlyingIOError)
        assert result.error.path == str(image)
        assert "utf-8" in result.message


class TestArguments:
    @pytest.mark.asyncio
    async def test_number_argument_is_a_type_mismatch(self, functions):
        result = await functions.exists(SassNumber(42))

        assert result.message == "Expected string, got number: 42"
        assert isinstance(result.error, TypeMismatchError)

    @pytest.mark.asyncio
    async def test_type_mismatch_in_join_segment(self, functions):
        result = await functions.join(_s("a"), SassNumber(1.5, "px"))

        assert result.message == "Expected string, got number: 1.5px"


@pytest.mark.asyncio
async def test_declarations_expose_every_function(functions, site):
    declarations = functions.declarations()

    assert set(declarations) == {
        "stylepath-fs-absolute-path($fs-registered-pathnames, $path-id, $segments...)",
        "stylepath-fs-join($segments...)",
        "stylepath-fs-exists($absolute-path)",
        "stylepath-fs-path-separator()",
        "stylepath-fs-list-files($directory, $glob: '*')",
        "stylepath-fs-list-directories($directory, $glob: '*')",
        "stylepath-fs-parse-filename($filename)",
        "stylepath-fs-info($filename)",
        "stylepath-fs-read-file($filename)",
    }

    absolute_path = declarations["stylepath-fs-absolute-path($fs-registered-pathnames, $path-id, $segments...)"]
    registered = SassMap(((_s("root"), _s(str(site))),))
    assert await absolute_path(registered, _s("root"), _s("a.png")) == _s(str(site / "a.png"))


class TestRegisteredPathsAcrossImports:
    @pytest.mark.asyncio
    async def test_root_registration_feeds_sandboxed_functions(self, project, registry):
        (project / "logo.png").write_bytes(b"png")
        settings = ResolverSettings(root=project, fs_sandbox=True)
        session = ImportSession()
        importer = create_importer(settings, registry=registry, session=session)
        await importer.resolve("fs(root)", str(project / "src" / "app.scss"))
        functions = FsFunctions(settings, session)

        logo = await functions.absolute_path(_s("root"), _s("logo.png"))
        outside = await functions.absolute_path(_s("root"), _s("../elsewhere.png"))

        assert logo == _s(str(project / "logo.png"))
        assert await functions.exists(logo) == TRUE
        result = await functions.exists(outside)
        assert isinstance(result, SassError)
        assert isinstance(result.error, SecurityViolationError)
        assert result.message == f"Security violation: Cannot access {project.parent / 'elsewhere.png'}"

    @pytest.mark.asyncio
    async def test_repeated_token_keeps_first_directory(self, project, settings, registry):
        session = ImportSession()
        importer = create_importer(settings, registry=registry, session=session)
        functions = FsFunctions(settings, session)

        first = await importer.resolve("fs(images)", str(project / "src" / "app.scss"))
        second = await importer.resolve("fs(images)", str(project / "vendor" / "_vendored.scss"))
        emitted = SassMap(((_s("images"), _s(str(project / "vendor"))),))

        result = await functions.absolute_path(_s("images"), _s("x.png"), registered=emitted)

        assert second.contents == first.contents
        assert result == _s(str(project / "src" / "x.png"))
