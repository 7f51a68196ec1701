from __future__ import annotations

"""
Global Pytest Configuration and Fixtures.

This module sets up the testing environment, including:
1. Path manipulation to ensure the 'src' directory is importable.
2. Shared fixtures: an isolated app per test and the docker sample stack.
"""

import os
import sys

import pytest

# -----------------------------------------------------------------------------
# Path Configuration
# -----------------------------------------------------------------------------
_SRC_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if _SRC_PATH not in sys.path:
    sys.path.insert(0, _SRC_PATH)

from tfsynth.core.builder import add_construct, add_resource, create_app, create_stack  # noqa: E402
from tfsynth.domain.construct_models import App, Stack  # noqa: E402


# -----------------------------------------------------------------------------
# Shared Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def app(tmp_path) -> App:
    """A fresh app whose output directory lives in tmp_path."""
    return create_app(str(tmp_path / "cdktf.out"))


@pytest.fixture
def stack(app: App) -> Stack:
    """An empty stack named 'stack'."""
    return create_stack(app, "stack")


@pytest.fixture
def docker_stack(stack: Stack) -> Stack:
    """
    The reference scenario: an image and a container using it.

    Structure:
    stack
      resource-image      (docker_image, name=ubuntu:latest)
      resource-container  (docker_container, image=resource-image)
    """
    add_resource(stack, "docker_image", "resource-image", {"name": "ubuntu:latest"})
    add_resource(stack, "docker_container", "resource-container", {"image": "resource-image"})
    return stack


@pytest.fixture
def application_stack(stack: Stack) -> Stack:
    """
    A stack with a grouping construct, as an application abstraction would build.

    Structure:
    stack
      resource (construct)
        image      (docker_image)
        container  (docker_container)
    """
    group = add_construct(stack, "resource")
    image = add_resource(group, "docker_image", "image", {"name": "ubuntu:latest", "keep_locally": False})
    add_resource(group, "docker_container", "container", {
        "name": "web",
        "image": image.ref("image_id"),
        "ports": [{"internal": 80, "external": 8000}],
    })
    return stack
