"""Catal-New: generate new Phoenix projects.

Basic usage:
    $ catal-new hello_world

For an umbrella project with separate core and web applications:
    $ catal-new hello_world --umbrella

Inside an umbrella's ``apps`` directory:
    $ catal-new-web hello_world_web
    $ catal-new-ecto hello_world

Programmatic usage:
    from catal_new import ExecutionContext, generate_project, resolve_options

    context = ExecutionContext.default()
    project = resolve_options("hello_world", {"mailer": False})
    generate_project(project, context)
"""

from catal_new.config import GeneratorConfig
from catal_new.context import ExecutionContext
from catal_new.project import Feature, GeneratorVariant, ProjectDescriptor, resolve_options
from catal_new.scaffolding import generate_project

__all__ = (
    "ExecutionContext",
    "Feature",
    "GeneratorConfig",
    "GeneratorVariant",
    "ProjectDescriptor",
    "generate_project",
    "resolve_options",
)
