"""Template manifests for scaffolding.

This module defines which bundled templates each generator renders, where the
rendered files are written, and which features they depend on.
"""

from dataclasses import dataclass, field
from typing import Literal

from catal_new.project import Feature, GeneratorVariant

__all__ = ("MANIFESTS", "PathKey", "TemplateEntry", "get_manifest")

PathKey = Literal["project", "app", "web"]


@dataclass(frozen=True)
class TemplateEntry:
    """A single file produced by a generator.

    Attributes:
        source: Template path relative to the bundled ``templates`` directory.
        target: Output path expression, rendered with the project bindings.
        root: Which project directory ``target`` is relative to.
        when: Features that must all be enabled for the file to be generated.
        unless: Features that must all be disabled for the file to be generated.
    """

    source: str
    target: str
    root: PathKey = "project"
    when: "frozenset[Feature]" = field(default_factory=frozenset)
    unless: "frozenset[Feature]" = field(default_factory=frozenset)

    def includes(self, features: "frozenset[Feature]") -> bool:
        return self.when <= features and not (self.unless & features)


def _entry(source: str, target: str, root: PathKey = "project", *when: Feature) -> TemplateEntry:
    return TemplateEntry(source=source, target=target, root=root, when=frozenset(when))


_ECTO = Feature.ECTO
_HTML = Feature.HTML
_GETTEXT = Feature.GETTEXT
_MAILER = Feature.MAILER

SINGLE_FILES: "tuple[TemplateEntry, ...]" = (
    _entry("phx_single/mix.exs", "mix.exs"),
    _entry("phx_single/README.md", "README.md"),
    _entry("phx_single/formatter.exs", ".formatter.exs"),
    _entry("phx_single/gitignore", ".gitignore"),
    _entry("phx_single/lib/app_name/application.ex", "lib/{{ app_name }}/application.ex"),
    _entry("phx_test/test_helper.exs", "test/test_helper.exs"),
)

CONFIG_FILES: "tuple[TemplateEntry, ...]" = (
    _entry("phx_config/config.exs", "config/config.exs"),
    _entry("phx_config/dev.exs", "config/dev.exs"),
    _entry("phx_config/test.exs", "config/test.exs"),
    _entry("phx_config/prod.exs", "config/prod.exs"),
    _entry("phx_config/runtime.exs", "config/runtime.exs"),
)

CORE_FILES: "tuple[TemplateEntry, ...]" = (
    _entry("phx_single/lib/app_name.ex", "lib/{{ app_name }}.ex", "app"),
    _entry("phx_ecto/repo.ex", "lib/{{ app_name }}/repo.ex", "app", _ECTO),
    _entry("phx_ecto/priv/repo/seeds.exs", "priv/repo/seeds.exs", "app", _ECTO),
    _entry("phx_ecto/priv/repo/migrations/formatter.exs", "priv/repo/migrations/.formatter.exs", "app", _ECTO),
    _entry("phx_ecto/support/data_case.ex", "test/support/data_case.ex", "app", _ECTO),
    _entry("phx_mailer/mailer.ex", "lib/{{ app_name }}/mailer.ex", "app", _MAILER),
)

WEB_FILES: "tuple[TemplateEntry, ...]" = (
    _entry("phx_web/web.ex", "lib/{{ lib_web_name }}.ex", "web"),
    _entry("phx_web/endpoint.ex", "lib/{{ lib_web_name }}/endpoint.ex", "web"),
    _entry("phx_web/router.ex", "lib/{{ lib_web_name }}/router.ex", "web"),
    _entry("phx_web/telemetry.ex", "lib/{{ lib_web_name }}/telemetry.ex", "web"),
    _entry("phx_web/gettext.ex", "lib/{{ lib_web_name }}/gettext.ex", "web", _GETTEXT),
    _entry("phx_web/controllers/error_json.ex", "lib/{{ lib_web_name }}/controllers/error_json.ex", "web"),
    _entry("phx_web/controllers/error_html.ex", "lib/{{ lib_web_name }}/controllers/error_html.ex", "web", _HTML),
    _entry(
        "phx_web/controllers/page_controller.ex",
        "lib/{{ lib_web_name }}/controllers/page_controller.ex",
        "web",
        _HTML,
    ),
    _entry("phx_web/controllers/page_html.ex", "lib/{{ lib_web_name }}/controllers/page_html.ex", "web", _HTML),
    _entry(
        "phx_web/controllers/page_html/home.html.heex",
        "lib/{{ lib_web_name }}/controllers/page_html/home.html.heex",
        "web",
        _HTML,
    ),
    _entry("phx_web/components/layouts.ex", "lib/{{ lib_web_name }}/components/layouts.ex", "web", _HTML),
    _entry(
        "phx_web/components/layouts/root.html.heex",
        "lib/{{ lib_web_name }}/components/layouts/root.html.heex",
        "web",
        _HTML,
    ),
    _entry(
        "phx_web/components/core_components.ex",
        "lib/{{ lib_web_name }}/components/core_components.ex",
        "web",
        _HTML,
    ),
    _entry("phx_gettext/errors.pot", "priv/gettext/errors.pot", "web", _GETTEXT),
    _entry("phx_gettext/errors.po", "priv/gettext/en/LC_MESSAGES/errors.po", "web", _GETTEXT),
    _entry("phx_assets/css/app.css", "assets/css/app.css", "web", _HTML),
    _entry("phx_assets/js/app.js", "assets/js/app.js", "web", _HTML),
    _entry("phx_assets/static/robots.txt", "priv/static/robots.txt", "web"),
    _entry("phx_test/support/conn_case.ex", "test/support/conn_case.ex", "web"),
    _entry(
        "phx_test/controllers/page_controller_test.exs",
        "test/{{ lib_web_name }}/controllers/page_controller_test.exs",
        "web",
        _HTML,
    ),
    _entry(
        "phx_test/controllers/error_html_test.exs",
        "test/{{ lib_web_name }}/controllers/error_html_test.exs",
        "web",
        _HTML,
    ),
    _entry(
        "phx_test/controllers/error_json_test.exs",
        "test/{{ lib_web_name }}/controllers/error_json_test.exs",
        "web",
    ),
)

UMBRELLA_FILES: "tuple[TemplateEntry, ...]" = (
    _entry("phx_umbrella/mix.exs", "mix.exs"),
    _entry("phx_umbrella/README.md", "README.md"),
    _entry("phx_umbrella/formatter.exs", ".formatter.exs"),
    _entry("phx_single/gitignore", ".gitignore"),
)

CORE_APP_FILES: "tuple[TemplateEntry, ...]" = (
    _entry("phx_apps/app_name/mix.exs", "mix.exs", "app"),
    _entry("phx_apps/app_name/formatter.exs", ".formatter.exs", "app"),
    _entry("phx_apps/app_name/application.ex", "lib/{{ app_name }}/application.ex", "app"),
    _entry("phx_test/test_helper.exs", "test/test_helper.exs", "app"),
)

WEB_APP_FILES: "tuple[TemplateEntry, ...]" = (
    _entry("phx_apps/web/mix.exs", "mix.exs", "web"),
    _entry("phx_apps/web/formatter.exs", ".formatter.exs", "web"),
    _entry("phx_apps/web/application.ex", "lib/{{ lib_web_name }}/application.ex", "web"),
    _entry("phx_test/test_helper.exs", "test/test_helper.exs", "web"),
)

MANIFESTS: "dict[GeneratorVariant, tuple[TemplateEntry, ...]]" = {
    GeneratorVariant.SINGLE: SINGLE_FILES + CONFIG_FILES + CORE_FILES + WEB_FILES,
    GeneratorVariant.UMBRELLA: UMBRELLA_FILES + CONFIG_FILES + CORE_APP_FILES + CORE_FILES + WEB_APP_FILES + WEB_FILES,
    GeneratorVariant.ECTO: CORE_APP_FILES + CORE_FILES,
    GeneratorVariant.WEB: WEB_APP_FILES + WEB_FILES,
}


def get_manifest(variant: "GeneratorVariant | str") -> "tuple[TemplateEntry, ...]":
    """Get the ordered template manifest for a generator variant.

    Args:
        variant: The generator variant or its value.

    Returns:
        The manifest entries in generation order.
    """
    return MANIFESTS[GeneratorVariant(variant)]
