import logging
from collections.abc import Callable
from dataclasses import replace
from pathlib import Path
from typing import TYPE_CHECKING, Any, TypeVar

from click import Choice, ClickException, Context, argument, command, option, pass_context, version_option
from click import Path as ClickPath
from click.core import ParameterSource

from catal_new.__metadata__ import __version__
from catal_new.project import DATABASE_ADAPTERS, HTTP_ADAPTERS, GeneratorVariant

if TYPE_CHECKING:
    from catal_new.context import ExecutionContext

F = TypeVar("F", bound=Callable[..., Any])

_FEATURE_FLAGS = (
    ("ecto", "Generate Ecto files (repository, seeds and data case)."),
    ("html", "Generate HTML views, components and assets."),
    ("gettext", "Generate files for internationalization."),
    ("mailer", "Generate Swoosh mailer files."),
    ("dashboard", "Include Phoenix LiveDashboard."),
)


def project_options(func: F) -> F:
    """Options shared by every generator command."""
    decorators = [
        argument("path", type=ClickPath(file_okay=False, path_type=Path)),
        option("--app", type=str, default=None, help="The name of the OTP application."),
        option("--module", type=str, default=None, help="The name of the base module in the generated skeleton."),
        option("--web-module", type=str, default=None, help="The name of the base web module."),
        option(
            "--database",
            type=Choice(sorted(DATABASE_ADAPTERS)),
            default=None,
            help="Specify the database adapter for Ecto.  [default: postgres]",
        ),
        option(
            "--adapter",
            type=Choice(sorted(HTTP_ADAPTERS)),
            default=None,
            help="Specify the HTTP adapter.  [default: bandit]",
        ),
        option("--binary-id", type=bool, is_flag=True, default=False, help="Use binary_id as primary key type."),
        option("--verbose", type=bool, is_flag=True, default=False, help="Enable verbose output."),
        option(
            "--install/--no-install",
            default=None,
            help="Fetch and install dependencies without asking.",
        ),
        option(
            "--version-check/--no-version-check",
            default=None,
            help="Check for a newer release of the generator.",
        ),
        *(
            option(f"--{name}/--no-{name}", default=None, help=help_text)
            for name, help_text in _FEATURE_FLAGS
        ),
    ]
    for decorator in reversed(decorators):
        func = decorator(func)
    return func


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(format="%(levelname)s %(name)s: %(message)s")
    logging.getLogger("catal_new").setLevel(logging.DEBUG if verbose else logging.WARNING)
    for logger_name in ("httpx", "httpcore"):
        logging.getLogger(logger_name).setLevel(logging.WARNING)


def run_generator(
    ctx: "Context",
    path: Path,
    options: "dict[str, Any]",
    variant: GeneratorVariant,
) -> None:
    """Run the full generation pipeline for ``path``.

    Raises:
        ClickException: If the environment or the project options are invalid.
    """
    from catal_new.context import ExecutionContext
    from catal_new.exceptions import CatalNewError
    from catal_new.orchestrator import run_post_generation
    from catal_new.project import resolve_options
    from catal_new.scaffolding import generate_project
    from catal_new.validation import check_environment, validate_project
    from catal_new.version import discard_version_check, maybe_warn_outdated, start_version_check

    options = {
        name: value
        for name, value in options.items()
        if ctx.get_parameter_source(name) is not ParameterSource.DEFAULT
    }
    verbose = bool(options.get("verbose"))
    _configure_logging(verbose)
    context: "ExecutionContext" = ctx.obj if ctx.obj is not None else ExecutionContext.default(verbose=verbose)
    config = context.config
    if "version_check" in options:
        config = replace(config, version_check=bool(options["version_check"]))

    version_future = start_version_check(config)
    completed = False
    try:
        check_environment(context)
        project = resolve_options(path, options, variant)
        project = validate_project(project, context)
        generate_project(project, context)
        run_post_generation(project, context)
        completed = True
    except CatalNewError as e:
        raise ClickException(str(e)) from e
    finally:
        if not completed:
            discard_version_check(version_future)
    maybe_warn_outdated(version_future, context, timeout=config.version_timeout)


_VERSION_MESSAGE = "Catal installer v%(version)s"


@command(
    name="catal-new",
    no_args_is_help=True,
    help="Create a new Phoenix project at PATH.",
)
@project_options
@option("--umbrella", type=bool, is_flag=True, default=False, help="Generate an umbrella project.")
@option("--prefix", type=str, default=None, help="Directory name of the umbrella project.")
@version_option(__version__, "-v", "--version", message=_VERSION_MESSAGE)
@pass_context
def new(ctx: "Context", path: Path, **options: Any) -> None:
    """Create a new Phoenix project."""
    run_generator(ctx, path, options, GeneratorVariant.SINGLE)


@command(
    name="catal-new-web",
    no_args_is_help=True,
    help="Create a new Phoenix web application at PATH, inside an umbrella's apps directory.",
)
@project_options
@version_option(__version__, "-v", "--version", message=_VERSION_MESSAGE)
@pass_context
def new_web(ctx: "Context", path: Path, **options: Any) -> None:
    """Create a new Phoenix web application."""
    run_generator(ctx, path, options, GeneratorVariant.WEB)


@command(
    name="catal-new-ecto",
    no_args_is_help=True,
    help="Create a new Ecto application at PATH, inside an umbrella's apps directory.",
)
@project_options
@version_option(__version__, "-v", "--version", message=_VERSION_MESSAGE)
@pass_context
def new_ecto(ctx: "Context", path: Path, **options: Any) -> None:
    """Create a new Ecto application."""
    run_generator(ctx, path, options, GeneratorVariant.ECTO)

