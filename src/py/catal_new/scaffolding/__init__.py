"""Project scaffolding module for catal-new.

Templates are rendered with a small, closed template language and written
according to a per-variant manifest. Supported variants:

- single: one application with the core and web layers
- umbrella: an umbrella with a core application and a web application
- web: a web application for an existing umbrella
- ecto: a core application with a repository for an existing umbrella
"""

from catal_new.scaffolding.generator import generate_project, get_generator
from catal_new.scaffolding.renderer import Template, render_string, render_template
from catal_new.scaffolding.templates import TemplateEntry, get_manifest

__all__ = [
    "Template",
    "TemplateEntry",
    "generate_project",
    "get_generator",
    "get_manifest",
    "render_string",
    "render_template",
]
