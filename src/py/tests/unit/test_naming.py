"""Tests for catal_new.naming module."""

from pathlib import Path

import pytest

from catal_new.exceptions import InvalidNameError
from catal_new.naming import camelize, derive_app_name, derive_module_name, derive_names


@pytest.mark.parametrize(
    ("path", "expected"),
    [
        ("hello_world", "hello_world"),
        ("/tmp/projects/hello_world", "hello_world"),
        ("projects/hello-world/", "hello_world"),
        ("Hello World", "hello_world"),
    ],
)
def test_derive_app_name_from_path(path: str, expected: str) -> None:
    assert derive_app_name(path) == expected


def test_derive_app_name_prefers_explicit_app() -> None:
    """An explicit name is returned as given so validation can report it."""
    assert derive_app_name("hello_world", app="Not-Valid") == "Not-Valid"


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("hello_world", "HelloWorld"),
        ("blog", "Blog"),
        ("my_app_2", "MyApp2"),
        ("admin/hello_world", "Admin.HelloWorld"),
    ],
)
def test_camelize(name: str, expected: str) -> None:
    assert camelize(name) == expected


def test_derive_module_name_with_namespace() -> None:
    assert derive_module_name("hello_world", namespace="Acme") == "Acme.HelloWorld"


def test_derive_module_name_explicit_module_wins() -> None:
    assert derive_module_name("hello_world", module="Custom.App", namespace="Acme") == "Custom.App"


def test_derive_names() -> None:
    assert derive_names(Path("/srv/hello_world")) == ("hello_world", "HelloWorld")


@pytest.mark.parametrize("path", ["123app", "/tmp/9lives"])
def test_derive_names_rejects_leading_digit(path: str) -> None:
    with pytest.raises(InvalidNameError):
        derive_names(path)


def test_derive_names_rejects_empty_name() -> None:
    with pytest.raises(InvalidNameError):
        derive_names("   ")
