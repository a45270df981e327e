"""Project descriptor and option resolution.

A :class:`ProjectDescriptor` is built once from the command line options and
drives every later stage: validation reads it, the renderer consumes its
bindings, and the post generation steps read its paths.
"""

import secrets
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any

from catal_new.exceptions import InvalidOptionError, UnknownOptionError
from catal_new.naming import camelize, derive_names

__all__ = (
    "DATABASE_ADAPTERS",
    "HTTP_ADAPTERS",
    "OPTION_DEFAULTS",
    "DatabaseAdapter",
    "Feature",
    "GeneratorVariant",
    "HttpAdapter",
    "ProjectDescriptor",
    "resolve_options",
)

PHOENIX_DEP = '{:phoenix, "~> 1.8.0"}'
ASSET_BUILDER_VERSIONS = {"tailwind": "~> 0.3", "esbuild": "~> 0.10"}


class Feature(str, Enum):
    """Optional parts of a generated project."""

    ECTO = "ecto"
    HTML = "html"
    GETTEXT = "gettext"
    MAILER = "mailer"
    BINARY_ID = "binary_id"
    DASHBOARD = "dashboard"


class GeneratorVariant(str, Enum):
    """Shape of the generated project."""

    SINGLE = "single"
    UMBRELLA = "umbrella"
    WEB = "web"
    ECTO = "ecto"


@dataclass(frozen=True)
class DatabaseAdapter:
    """An Ecto adapter and the repository settings it is generated with.

    Attributes:
        name: Value accepted by ``--database``.
        app: Hex package providing the driver.
        version: Version requirement for ``app``.
        module: The Ecto adapter module.
        dev: Extra repository options for the dev environment.
        test: Extra repository options for the test environment.
    """

    name: str
    app: str
    version: str
    module: str
    dev: "tuple[str, ...]" = ()
    test: "tuple[str, ...]" = ()

    def dev_config(self, app_name: str) -> str:
        return _keyword_lines(self.dev, app_name, f"{app_name}_dev")

    def test_config(self, app_name: str) -> str:
        return _keyword_lines(self.test, app_name, f'{app_name}_test#{{System.get_env("MIX_TEST_PARTITION")}}')


@dataclass(frozen=True)
class HttpAdapter:
    """A web server adapter for the Phoenix endpoint."""

    name: str
    app: str
    version: str
    module: str


def _keyword_lines(lines: "tuple[str, ...]", app_name: str, database: str) -> str:
    return ",\n  ".join(line.format(app_name=app_name, database=database) for line in lines)


_SERVER_DEV = (
    'hostname: "localhost"',
    'database: "{database}"',
    "stacktrace: true",
    "show_sensitive_data_on_connection_error: true",
    "pool_size: 10",
)
_SERVER_TEST = (
    'hostname: "localhost"',
    'database: "{database}"',
    "pool: Ecto.Adapters.SQL.Sandbox",
    "pool_size: System.schedulers_online() * 2",
)

DATABASE_ADAPTERS: dict[str, DatabaseAdapter] = {
    "postgres": DatabaseAdapter(
        name="postgres",
        app="postgrex",
        version=">= 0.0.0",
        module="Ecto.Adapters.Postgres",
        dev=('username: "postgres"', 'password: "postgres"', *_SERVER_DEV),
        test=('username: "postgres"', 'password: "postgres"', *_SERVER_TEST),
    ),
    "mysql": DatabaseAdapter(
        name="mysql",
        app="myxql",
        version=">= 0.0.0",
        module="Ecto.Adapters.MyXQL",
        dev=('username: "root"', 'password: ""', *_SERVER_DEV),
        test=('username: "root"', 'password: ""', *_SERVER_TEST),
    ),
    "mssql": DatabaseAdapter(
        name="mssql",
        app="tds",
        version=">= 0.0.0",
        module="Ecto.Adapters.Tds",
        dev=('username: "sa"', 'password: "some!Password"', *_SERVER_DEV, "instance: \"MSSQLSERVER\""),
        test=('username: "sa"', 'password: "some!Password"', *_SERVER_TEST, "instance: \"MSSQLSERVER\""),
    ),
    "sqlite3": DatabaseAdapter(
        name="sqlite3",
        app="ecto_sqlite3",
        version=">= 0.0.0",
        module="Ecto.Adapters.SQLite3",
        dev=(
            'database: Path.expand("../{database}.db", __DIR__)',
            "pool_size: 5",
            "stacktrace: true",
            "show_sensitive_data_on_connection_error: true",
        ),
        test=(
            'database: Path.expand("../{app_name}_test.db", __DIR__)',
            "pool_size: 5",
            "pool: Ecto.Adapters.SQL.Sandbox",
        ),
    ),
}

HTTP_ADAPTERS: dict[str, HttpAdapter] = {
    "bandit": HttpAdapter(name="bandit", app="bandit", version="~> 1.5", module="Bandit.PhoenixAdapter"),
    "cowboy": HttpAdapter(
        name="cowboy", app="plug_cowboy", version="~> 2.7", module="Phoenix.Endpoint.Cowboy2Adapter"
    ),
}

OPTION_DEFAULTS: dict[str, Any] = {
    "app": None,
    "module": None,
    "web_module": None,
    "database": "postgres",
    "adapter": "bandit",
    "binary_id": False,
    "verbose": False,
    "install": None,
    "ecto": True,
    "html": True,
    "gettext": True,
    "mailer": True,
    "dashboard": True,
    "umbrella": False,
    "prefix": None,
    "version_check": True,
}

_FEATURE_OPTIONS = {
    Feature.ECTO: "ecto",
    Feature.HTML: "html",
    Feature.GETTEXT: "gettext",
    Feature.MAILER: "mailer",
    Feature.BINARY_ID: "binary_id",
    Feature.DASHBOARD: "dashboard",
}

# Features a sub-app variant never generates, regardless of the flags given.
_VARIANT_EXCLUDES: dict[GeneratorVariant, frozenset[Feature]] = {
    GeneratorVariant.SINGLE: frozenset(),
    GeneratorVariant.UMBRELLA: frozenset(),
    GeneratorVariant.WEB: frozenset({Feature.ECTO, Feature.MAILER}),
    GeneratorVariant.ECTO: frozenset({Feature.HTML, Feature.GETTEXT, Feature.DASHBOARD}),
}


def _empty_bindings() -> "Mapping[str, Any]":
    return MappingProxyType({})


@dataclass(frozen=True)
class ProjectDescriptor:
    """The resolved, immutable description of a project to generate.

    Attributes:
        app_name: The OTP application name.
        module_name: The base module of the application.
        target_path: The directory given on the command line, expanded.
        variant: Which generator produces the project.
        features: Enabled optional features.
        database: The Ecto adapter.
        adapter: The HTTP adapter.
        web_app_name: Application that owns the web layer.
        web_module: Namespace of the web layer.
        project_path: Root directory of the generated project.
        app_path: Directory of the core application.
        web_path: Directory of the web application.
        asset_builders: Frontend tools installed with the dependencies.
        install: Explicit install decision, ``None`` to ask.
        verbose: Show the output of external commands.
        from_app_flag: Whether ``app_name`` was given with ``--app``.
        bindings: Template bindings, computed once.
        cached_build_path: Cache directory copied into the project, if any.
    """

    app_name: str
    module_name: str
    target_path: Path
    variant: GeneratorVariant = GeneratorVariant.SINGLE
    features: "frozenset[Feature]" = frozenset()
    database: DatabaseAdapter = DATABASE_ADAPTERS["postgres"]
    adapter: HttpAdapter = HTTP_ADAPTERS["bandit"]
    web_app_name: str = ""
    web_module: str = ""
    project_path: "Path | None" = None
    app_path: "Path | None" = None
    web_path: "Path | None" = None
    asset_builders: "tuple[str, ...]" = ()
    install: "bool | None" = None
    verbose: bool = False
    from_app_flag: bool = False
    bindings: "Mapping[str, Any]" = field(default_factory=_empty_bindings)
    cached_build_path: "Path | None" = None

    def has(self, feature: Feature) -> bool:
        return feature in self.features

    @property
    def ecto(self) -> bool:
        return Feature.ECTO in self.features

    @property
    def html(self) -> bool:
        return Feature.HTML in self.features

    @property
    def root_path(self) -> Path:
        """The directory validated, initialized and summarized for this variant."""
        if self.variant is GeneratorVariant.WEB:
            return self.web_path or self.target_path
        if self.variant is GeneratorVariant.ECTO:
            return self.app_path or self.target_path
        return self.project_path or self.target_path

    def with_cached_build(self, path: Path) -> "ProjectDescriptor":
        return replace(self, cached_build_path=path)


def _random_string(length: int) -> str:
    return secrets.token_urlsafe(length)[:length]


def _generators(features: "frozenset[Feature]", context_app: "str | None" = None) -> str:
    parts = [f"context_app: :{context_app}"] if context_app else []
    parts.append("timestamp_type: :utc_datetime")
    if Feature.BINARY_ID in features:
        parts.append("binary_id: true")
    return f"[{', '.join(parts)}]"


def _dev_routes_description(features: "frozenset[Feature]") -> str:
    enabled = [
        label
        for feature, label in ((Feature.DASHBOARD, "LiveDashboard"), (Feature.MAILER, "Swoosh mailbox preview"))
        if feature in features
    ]
    return " and ".join(enabled)


def _build_bindings(project: ProjectDescriptor, context_app: "str | None") -> "Mapping[str, Any]":
    app_module = project.module_name
    features = project.features
    umbrella = project.variant is GeneratorVariant.UMBRELLA
    ecto = Feature.ECTO in features
    bindings: dict[str, Any] = {
        "app_name": project.app_name,
        "app_module": app_module,
        "root_app_name": f"{project.app_name}_umbrella" if umbrella else project.app_name,
        "root_app_module": f"{app_module}.Umbrella" if umbrella else app_module,
        "web_app_name": project.web_app_name,
        "web_namespace": project.web_module,
        "endpoint_module": f"{project.web_module}.Endpoint",
        "lib_web_name": project.app_name if project.variant is GeneratorVariant.WEB else f"{project.app_name}_web",
        "web_dir": f"../apps/{project.web_app_name}" if umbrella else "..",
        "context_app": context_app or "",
        "in_umbrella": umbrella,
        "namespaced": app_module != camelize(project.app_name),
        "phoenix_dep": PHOENIX_DEP,
        "generators": _generators(features),
        "web_generators": _generators(features, context_app),
        "dev_routes": Feature.DASHBOARD in features or Feature.MAILER in features,
        "dev_routes_description": _dev_routes_description(features),
        "adapter_app": project.database.app,
        "adapter_version": project.database.version,
        "adapter_module": project.database.module,
        "repo_dev_config": project.database.dev_config(project.app_name),
        "repo_test_config": project.database.test_config(project.app_name),
        "sqlite3": ecto and project.database.name == "sqlite3",
        "web_adapter_app": project.adapter.app,
        "web_adapter_version": project.adapter.version,
        "web_adapter_module": project.adapter.module,
        "asset_builders": list(project.asset_builders),
        "asset_builder_deps": [
            {"name": builder, "version": ASSET_BUILDER_VERSIONS.get(builder, ">= 0.0.0")}
            for builder in project.asset_builders
        ],
        "secret_key_base_dev": _random_string(64),
        "secret_key_base_test": _random_string(64),
        "signing_salt": _random_string(8),
        "lv_signing_salt": _random_string(8),
    }
    for feature, option in _FEATURE_OPTIONS.items():
        bindings[option] = feature in features
    return MappingProxyType(bindings)


def _check_choice(option: str, value: Any, choices: "Mapping[str, Any]") -> None:
    if value not in choices:
        raise InvalidOptionError(option, value, sorted(choices))


def resolve_options(
    path: "str | Path",
    options: "Mapping[str, Any] | None" = None,
    variant: GeneratorVariant = GeneratorVariant.SINGLE,
) -> ProjectDescriptor:
    """Merge ``options`` with their defaults into a project descriptor.

    Args:
        path: The target path given on the command line.
        options: Option values keyed by option name. ``None`` values fall back
            to the default.
        variant: The requested generator. ``umbrella=True`` turns a single
            project into an umbrella project.

    Raises:
        UnknownOptionError: If ``options`` has a key that is not a known option.
        InvalidOptionError: If ``database`` or ``adapter`` is not supported.
        InvalidNameError: If no application name can be derived.

    Returns:
        The resolved descriptor with its bindings computed.
    """
    resolved = dict(OPTION_DEFAULTS)
    for key, value in (options or {}).items():
        if key not in OPTION_DEFAULTS:
            raise UnknownOptionError(key)
        if value is not None:
            resolved[key] = value

    _check_choice("database", resolved["database"], DATABASE_ADAPTERS)
    _check_choice("adapter", resolved["adapter"], HTTP_ADAPTERS)

    if variant is GeneratorVariant.SINGLE and resolved["umbrella"]:
        variant = GeneratorVariant.UMBRELLA

    base_path = Path(path).expanduser().resolve()
    app_name, module_name = derive_names(base_path, resolved["app"], resolved["module"])

    features = frozenset(feature for feature, option in _FEATURE_OPTIONS.items() if resolved[option])
    features -= _VARIANT_EXCLUDES[variant]
    if variant is GeneratorVariant.ECTO:
        features |= {Feature.ECTO}

    context_app: "str | None" = None
    web_module = resolved["web_module"] or f"{module_name}Web"
    web_app_name = app_name
    project_path = app_path = web_path = base_path
    if variant is GeneratorVariant.UMBRELLA:
        project_path = base_path.parent / (resolved["prefix"] or f"{base_path.name}_umbrella")
        app_path = project_path / "apps" / app_name
        web_app_name = f"{app_name}_web"
        web_path = project_path / "apps" / web_app_name
        context_app = app_name
    elif variant is GeneratorVariant.WEB:
        web_module = resolved["web_module"] or module_name
        context_app = app_name.removesuffix("_web") if app_name.endswith("_web") else None

    project = ProjectDescriptor(
        app_name=app_name,
        module_name=module_name,
        target_path=base_path,
        variant=variant,
        features=features,
        database=DATABASE_ADAPTERS[resolved["database"]],
        adapter=HTTP_ADAPTERS[resolved["adapter"]],
        web_app_name=web_app_name,
        web_module=web_module,
        project_path=project_path,
        app_path=app_path,
        web_path=web_path,
        asset_builders=("tailwind", "esbuild") if Feature.HTML in features else (),
        install=resolved["install"],
        verbose=bool(resolved["verbose"]),
        from_app_flag=bool(resolved["app"]),
    )
    return replace(project, bindings=_build_bindings(project, context_app))
