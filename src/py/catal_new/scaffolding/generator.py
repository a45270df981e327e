"""Project scaffolding generator.

This module handles the generation of project files from templates.
"""

from pathlib import Path
from typing import TYPE_CHECKING, ClassVar

from catal_new.project import GeneratorVariant
from catal_new.scaffolding.renderer import Template, render_string
from catal_new.scaffolding.templates import TemplateEntry, get_manifest

if TYPE_CHECKING:
    from catal_new.context import ExecutionContext
    from catal_new.project import ProjectDescriptor

__all__ = (
    "GENERATORS",
    "EctoGenerator",
    "Generator",
    "SingleGenerator",
    "UmbrellaGenerator",
    "WebGenerator",
    "generate_project",
    "get_generator",
    "get_template_dir",
)


def get_template_dir() -> Path:
    """Get the directory containing the bundled templates.

    Returns:
        Path to the templates directory.
    """
    return Path(__file__).parent.parent / "templates"


class Generator:
    """Render a manifest of templates into a project tree.

    Subclasses only choose the manifest. Files whose feature conditions do not
    hold are skipped before anything is rendered, so they never exist on disk.
    """

    variant: ClassVar[GeneratorVariant] = GeneratorVariant.SINGLE

    def __init__(self, template_dir: "Path | None" = None) -> None:
        self.template_dir = template_dir or get_template_dir()
        self._cache: dict[str, Template] = {}

    @property
    def manifest(self) -> "tuple[TemplateEntry, ...]":
        return get_manifest(self.variant)

    def _template(self, source: str) -> Template:
        if source not in self._cache:
            self._cache[source] = Template.from_path(self.template_dir / source)
        return self._cache[source]

    def output_path(self, entry: TemplateEntry, project: "ProjectDescriptor") -> Path:
        """Resolve the concrete output path of ``entry`` for ``project``."""
        roots = {
            "project": project.project_path,
            "app": project.app_path,
            "web": project.web_path,
        }
        root = roots[entry.root] or project.target_path
        return root / render_string(entry.target, project.bindings, name=entry.target)

    def entries(self, project: "ProjectDescriptor") -> "list[TemplateEntry]":
        """Return the manifest entries included for the project's features."""
        return [entry for entry in self.manifest if entry.includes(project.features)]

    def generate(self, project: "ProjectDescriptor", context: "ExecutionContext") -> list[Path]:
        """Generate every included file.

        Existing files are overwritten.

        Args:
            project: The validated project descriptor.
            context: Execution context used for output.

        Returns:
            List of generated file paths, in manifest order.
        """
        generated_files: list[Path] = []
        for entry in self.entries(project):
            output_path = self.output_path(entry, project)
            self._render_and_write(entry, output_path, project, context)
            generated_files.append(output_path)
        return generated_files

    def _render_and_write(
        self,
        entry: TemplateEntry,
        output_path: Path,
        project: "ProjectDescriptor",
        context: "ExecutionContext",
    ) -> None:
        content = self._template(entry.source).render(project.bindings)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(content, encoding="utf-8")
        context.info(f"[green]* creating[/] {_display_path(output_path, context.cwd)}")


class SingleGenerator(Generator):
    """A standalone project with the core and web layers in one application."""

    variant = GeneratorVariant.SINGLE


class UmbrellaGenerator(Generator):
    """An umbrella project with separate core and web applications under ``apps/``."""

    variant = GeneratorVariant.UMBRELLA


class WebGenerator(Generator):
    """A web application to be placed inside an existing umbrella."""

    variant = GeneratorVariant.WEB


class EctoGenerator(Generator):
    """A core application with a repository, for an existing umbrella."""

    variant = GeneratorVariant.ECTO


GENERATORS: "dict[GeneratorVariant, type[Generator]]" = {
    GeneratorVariant.SINGLE: SingleGenerator,
    GeneratorVariant.UMBRELLA: UmbrellaGenerator,
    GeneratorVariant.WEB: WebGenerator,
    GeneratorVariant.ECTO: EctoGenerator,
}


def get_generator(variant: "GeneratorVariant | str") -> Generator:
    return GENERATORS[GeneratorVariant(variant)]()


def generate_project(project: "ProjectDescriptor", context: "ExecutionContext") -> list[Path]:
    """Generate ``project`` with the generator matching its variant.

    Returns:
        List of generated file paths.
    """
    return get_generator(project.variant).generate(project, context)


def _display_path(path: Path, cwd: Path) -> str:
    try:
        return str(path.relative_to(cwd))
    except ValueError:
        return str(path)
