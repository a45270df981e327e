"""Post generation steps.

After the files are written the project may receive a cached build, a git
repository and its dependencies. None of these steps abort the run: a command
that fails is reported to the user as a missing step to run by hand.
"""

import logging
import shutil
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import TYPE_CHECKING

from rich.markup import escape

from catal_new.exceptions import CommandExecutionError, ExecutableNotFoundError
from catal_new.project import GeneratorVariant

if TYPE_CHECKING:
    from catal_new.context import ExecutionContext
    from catal_new.project import ProjectDescriptor

__all__ = (
    "install_deps",
    "maybe_copy_cached_build",
    "maybe_init_git",
    "maybe_prompt_to_install_deps",
    "print_missing_steps",
    "run_command",
    "run_post_generation",
)

logger = logging.getLogger("catal_new")


def run_command(context: "ExecutionContext", command: str, cwd: Path, *, log: bool = True) -> list[str]:
    """Run ``command`` and report it as a missing step if it fails.

    Args:
        context: The execution context.
        command: The command line to run.
        cwd: Directory to run the command in.
        log: Print the command before running it.

    Returns:
        An empty list on success, otherwise ``["$ <command>"]``.
    """
    if log:
        context.info(f"[green]* running[/] {escape(command)}")
    try:
        context.runner.execute(command, cwd)
    except (CommandExecutionError, ExecutableNotFoundError) as e:
        logger.debug("Step failed: %s", e)
        return [f"$ {command}"]
    return []


def maybe_copy_cached_build(project: "ProjectDescriptor", context: "ExecutionContext") -> "ProjectDescriptor":
    """Copy the configured cache directory over the new project.

    The cache is only recorded on the descriptor when it was actually copied, so
    a cache directory that does not exist still leads to the install prompt.

    Returns:
        The descriptor, with ``cached_build_path`` set when a cache was copied.
    """
    cache_dir = context.config.cache_dir
    if cache_dir is None:
        return project
    if not cache_dir.exists():
        logger.debug("Cache directory %s does not exist, skipping copy", cache_dir)
        return project
    context.info(f"Copying cached build from {escape(str(cache_dir))}")
    shutil.copytree(cache_dir, project.root_path, dirs_exist_ok=True)
    return project.with_cached_build(cache_dir)


def maybe_init_git(project: "ProjectDescriptor", context: "ExecutionContext") -> "ProjectDescriptor":
    """Initialize a git repository unless git is missing or one already exists."""
    git = context.which("git")
    path = project.root_path
    if git is None or context.runner.capture([git, "status"], path).ok:
        return project
    context.info("[green]* initializing git repository[/]")
    result = context.runner.capture([git, "init"], path)
    if not result.ok:
        context.error(f"Failed to initialize git repository: {escape(result.output)}")
    return project


def install_deps(project: "ProjectDescriptor", context: "ExecutionContext") -> list[str]:
    """Fetch and compile dependencies, installing asset builders in parallel.

    Builders are compiled first, together with jason, so that their install
    tasks can run side by side in the web application without compiling.
    Every install is finished before the full dependency compile starts.

    Returns:
        The missing steps for commands that failed.
    """
    path = project.root_path
    steps = run_command(context, "mix deps.get", path)
    if steps:
        return steps

    builders = project.asset_builders
    if builders:
        context.info("[green]* running[/] mix assets.setup")
        steps += run_command(context, f"mix deps.compile jason {' '.join(builders)}", path, log=False)
        web_path = project.web_path or path
        with ThreadPoolExecutor(max_workers=len(builders), thread_name_prefix="catal-new-assets") as pool:
            futures = [
                pool.submit(
                    run_command,
                    context,
                    f"mix do loadpaths --no-compile --no-listeners + {builder}.install",
                    web_path,
                    log=False,
                )
                for builder in builders
            ]
            for future in futures:
                steps += future.result()

    steps += run_command(context, "mix deps.compile", path)
    return steps


def print_missing_steps(context: "ExecutionContext", steps: "list[str]") -> None:
    lines = "\n".join(f"    {escape(step)}" for step in steps)
    context.info(f"\nWe are almost there! The following steps are missing:\n\n{lines}\n")


def _print_ecto_info(context: "ExecutionContext") -> None:
    context.info("Then configure your database in config/dev.exs and run:\n\n    $ mix ecto.create\n")


def _print_pubsub_info(project: "ProjectDescriptor", context: "ExecutionContext") -> None:
    context.info(
        "Your web app requires a PubSub server to be running.\n"
        "The PubSub server is typically defined in a `catal-new-ecto` app.\n"
        "If you don't plan to define an Ecto app, you must explicitly start\n"
        "the PubSub in your supervision tree as:\n\n"
        f"    {{Phoenix.PubSub, name: {project.module_name}.PubSub}}\n"
    )


def _print_mix_info(project: "ProjectDescriptor", context: "ExecutionContext") -> None:
    if project.variant is GeneratorVariant.ECTO:
        context.info("You can run your app inside IEx (Interactive Elixir) as:\n\n    $ iex -S mix\n")
        return
    context.info(
        "Start your Phoenix app with:\n\n"
        "    $ mix phx.server\n\n"
        "You can also run your app inside IEx (Interactive Elixir) as:\n\n"
        "    $ iex -S mix phx.server\n"
    )


def _relative_path(path: Path, cwd: Path) -> str:
    try:
        return str(path.relative_to(cwd))
    except ValueError:
        return path.name


def maybe_prompt_to_install_deps(project: "ProjectDescriptor", context: "ExecutionContext") -> "list[str] | None":
    """Install dependencies if wanted and print the remaining setup steps.

    Nothing is asked or printed when a cached build was copied in, since its
    dependencies are already in place.

    Returns:
        The missing steps printed to the user, or ``None`` when skipped.
    """
    if project.cached_build_path is not None:
        return None

    install = project.install
    if install is None:
        install = context.ask("\nFetch and install dependencies?")

    steps = [f"$ cd {_relative_path(project.root_path, context.cwd)}"]
    steps += install_deps(project, context) if install else ["$ mix deps.get"]

    print_missing_steps(context, steps)
    if project.ecto and project.variant is not GeneratorVariant.WEB:
        _print_ecto_info(context)
    if project.variant is GeneratorVariant.WEB:
        _print_pubsub_info(project, context)
    _print_mix_info(project, context)
    return steps


def run_post_generation(project: "ProjectDescriptor", context: "ExecutionContext") -> "ProjectDescriptor":
    """Run every post generation step in order.

    Returns:
        The final descriptor, including any recorded cache path.
    """
    project = maybe_copy_cached_build(project, context)
    project = maybe_init_git(project, context)
    maybe_prompt_to_install_deps(project, context)
    return project
