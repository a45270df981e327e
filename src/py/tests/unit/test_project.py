"""Tests for catal_new.project module."""

from dataclasses import FrozenInstanceError
from pathlib import Path

import pytest

from catal_new.exceptions import InvalidOptionError, UnknownOptionError
from catal_new.project import (
    DATABASE_ADAPTERS,
    HTTP_ADAPTERS,
    Feature,
    GeneratorVariant,
    resolve_options,
)


def test_resolve_defaults(tmp_path: Path) -> None:
    project = resolve_options(tmp_path / "hello_world")

    assert project.app_name == "hello_world"
    assert project.module_name == "HelloWorld"
    assert project.web_module == "HelloWorldWeb"
    assert project.variant is GeneratorVariant.SINGLE
    assert project.features == {Feature.ECTO, Feature.HTML, Feature.GETTEXT, Feature.MAILER, Feature.DASHBOARD}
    assert project.database is DATABASE_ADAPTERS["postgres"]
    assert project.adapter is HTTP_ADAPTERS["bandit"]
    assert project.project_path == project.app_path == project.web_path == tmp_path / "hello_world"
    assert project.root_path == tmp_path / "hello_world"
    assert project.asset_builders == ("tailwind", "esbuild")
    assert project.install is None
    assert project.cached_build_path is None


def test_none_values_fall_back_to_defaults(tmp_path: Path) -> None:
    project = resolve_options(tmp_path / "blog", {"database": None, "html": None})

    assert project.database.name == "postgres"
    assert project.html


def test_unknown_option_is_rejected(tmp_path: Path) -> None:
    with pytest.raises(UnknownOptionError, match="live"):
        resolve_options(tmp_path / "blog", {"live": True})


@pytest.mark.parametrize(("option", "value"), [("database", "oracle"), ("adapter", "yaws")])
def test_invalid_choice_is_rejected(tmp_path: Path, option: str, value: str) -> None:
    with pytest.raises(InvalidOptionError, match=value):
        resolve_options(tmp_path / "blog", {option: value})


def test_descriptor_is_immutable(tmp_path: Path) -> None:
    project = resolve_options(tmp_path / "blog")

    with pytest.raises(FrozenInstanceError):
        project.app_name = "other"  # type: ignore[misc]
    with pytest.raises(TypeError):
        project.bindings["app_name"] = "other"  # type: ignore[index]


def test_with_cached_build_returns_new_descriptor(tmp_path: Path) -> None:
    project = resolve_options(tmp_path / "blog")
    cached = project.with_cached_build(tmp_path / "cache")

    assert cached.cached_build_path == tmp_path / "cache"
    assert project.cached_build_path is None
    assert cached.bindings is project.bindings


def test_feature_bindings_follow_flags(tmp_path: Path) -> None:
    project = resolve_options(tmp_path / "blog", {"mailer": False, "binary_id": True, "dashboard": False})

    assert not project.has(Feature.MAILER)
    assert project.bindings["mailer"] is False
    assert project.bindings["binary_id"] is True
    assert project.bindings["dev_routes"] is False
    assert "binary_id: true" in project.bindings["generators"]


def test_no_html_has_no_asset_builders(tmp_path: Path) -> None:
    project = resolve_options(tmp_path / "blog", {"html": False})

    assert project.asset_builders == ()
    assert project.bindings["asset_builder_deps"] == []


def test_database_bindings(tmp_path: Path) -> None:
    project = resolve_options(tmp_path / "blog", {"database": "sqlite3"})

    assert project.bindings["adapter_app"] == "ecto_sqlite3"
    assert project.bindings["adapter_module"] == "Ecto.Adapters.SQLite3"
    assert project.bindings["sqlite3"] is True
    assert 'Path.expand("../blog_dev.db", __DIR__)' in project.bindings["repo_dev_config"]


def test_http_adapter_bindings(tmp_path: Path) -> None:
    project = resolve_options(tmp_path / "blog", {"adapter": "cowboy"})

    assert project.bindings["web_adapter_app"] == "plug_cowboy"
    assert project.bindings["web_adapter_module"] == "Phoenix.Endpoint.Cowboy2Adapter"


def test_explicit_names(tmp_path: Path) -> None:
    project = resolve_options(tmp_path / "some-dir", {"app": "shop", "module": "Acme.Shop", "web_module": "Acme.Web"})

    assert project.app_name == "shop"
    assert project.from_app_flag
    assert project.module_name == "Acme.Shop"
    assert project.web_module == "Acme.Web"
    assert project.bindings["namespaced"] is True
    assert project.bindings["endpoint_module"] == "Acme.Web.Endpoint"


def test_umbrella_paths(tmp_path: Path) -> None:
    project = resolve_options(tmp_path / "shop", {"umbrella": True})

    assert project.variant is GeneratorVariant.UMBRELLA
    assert project.project_path == tmp_path / "shop_umbrella"
    assert project.app_path == tmp_path / "shop_umbrella" / "apps" / "shop"
    assert project.web_path == tmp_path / "shop_umbrella" / "apps" / "shop_web"
    assert project.web_app_name == "shop_web"
    assert project.root_path == project.project_path
    assert project.bindings["root_app_module"] == "Shop.Umbrella"
    assert project.bindings["context_app"] == "shop"
    assert project.bindings["web_dir"] == "../apps/shop_web"


def test_umbrella_prefix(tmp_path: Path) -> None:
    project = resolve_options(tmp_path / "shop", {"umbrella": True, "prefix": "platform"})

    assert project.project_path == tmp_path / "platform"


def test_web_variant(tmp_path: Path) -> None:
    project = resolve_options(tmp_path / "shop_web", variant=GeneratorVariant.WEB)

    assert project.web_module == "ShopWeb"
    assert project.root_path == tmp_path / "shop_web"
    assert not project.ecto
    assert not project.has(Feature.MAILER)
    assert project.bindings["context_app"] == "shop"
    assert project.bindings["lib_web_name"] == "shop_web"


def test_ecto_variant_forces_ecto(tmp_path: Path) -> None:
    project = resolve_options(tmp_path / "shop", {"ecto": False}, variant=GeneratorVariant.ECTO)

    assert project.ecto
    assert not project.html
    assert project.asset_builders == ()
