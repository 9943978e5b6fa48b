import io
import json
import os
import tarfile

import click
import pytest

from cdeploy.MODELS.deploy_config import DeployConfig
from cdeploy.PARSERS.manifest_reader import ManifestReader
from cdeploy.RUNNERS.command_runner import CommandError
from cdeploy.UTILS.console import Console


class FakeDockerCli:
    """
    In-memory stand-in for DockerCli that records every call.

    ``bound`` maps a service to the container name compose reports for it.
    """
    def __init__(self, services=None, containers=None, bound=None, images=None,
                 failing_loads=None, failing_up=None, installed=True, config_valid=True, failing_lookup=None):
        self.services = list(services or [])
        self.containers = list(containers or [])
        self.bound = dict(bound or {})
        self.images = set(images or [])
        self.failing_loads = set(failing_loads or [])
        self.failing_up = set(failing_up or [])
        self.failing_lookup = set(failing_lookup or [])
        self.installed = installed
        self.config_valid = config_valid
        self.calls = []

    def calls_of(self, kind):
        return [c for c in self.calls if c[0] == kind]

    def compose_installed(self):
        return self.installed

    def compose_config_valid(self):
        self.calls.append(("config",))
        return self.config_valid

    def compose_services(self):
        return list(self.services)

    def compose_container_id(self, service):
        if service in self.failing_lookup:
            raise CommandError(["docker-compose", "ps", "-q", service], 1, "no such service")
        name = self.bound.get(service)
        return f"id-{name}" if name else None

    def container_name(self, container_id):
        return container_id[3:] if container_id.startswith("id-") else None

    def container_names(self):
        self.calls.append(("ps",))
        return list(self.containers)

    def compose_up(self, service, force_recreate=False):
        self.calls.append(("up", service, force_recreate))
        if service in self.failing_up:
            raise CommandError(["docker-compose", "up", "-d", service], 1, "boom")

    def compose_down(self):
        self.calls.append(("down",))

    def compose_stop(self, service):
        self.calls.append(("stop", service))

    def compose_rm(self, service, stop=False, volumes=False):
        self.calls.append(("rm", service, stop, volumes))

    def compose_ps_services(self):
        return list(self.bound)

    def image_exists(self, tag):
        self.calls.append(("inspect", tag))
        return tag in self.images

    def load_image(self, path, quiet=True):
        name = os.path.basename(path)
        self.calls.append(("load", name))
        if name in self.failing_loads:
            return False
        tag = ManifestReader.first_repo_tag(path)
        if tag:
            self.images.add(tag)
        return True

    def list_images(self):
        return sorted(self.images)

    def remove_image(self, reference):
        self.calls.append(("rmi", reference))
        self.images.discard(reference)


class RecordingConsole(Console):
    """Console that keeps unstyled output lines."""
    def __init__(self):
        self.lines = []
        super().__init__(echo=lambda text="": self.lines.append(click.unstyle(text)))

    @property
    def text(self):
        return "\n".join(self.lines)


def _add_file(tar, name, data):
    info = tarfile.TarInfo(name)
    info.size = len(data)
    tar.addfile(info, io.BytesIO(data))


@pytest.fixture
def make_archive(tmp_path):
    """
    Builds a docker-save style tar in tmp_path.
    Pass ``tags`` for a well-formed manifest, ``raw`` for arbitrary manifest
    bytes, or neither for an archive without a manifest.
    """
    def _make(name, tags=None, raw=None, directory=None):
        path = (directory or tmp_path) / name
        with tarfile.open(path, "w") as tar:
            _add_file(tar, "abc123/layer.tar", b"layer-bytes")
            if raw is not None:
                _add_file(tar, "manifest.json", raw)
            elif tags is not None:
                manifest = [{"Config": "abc123.json", "RepoTags": tags, "Layers": ["abc123/layer.tar"]}]
                _add_file(tar, "manifest.json", json.dumps(manifest).encode())
        return str(path)
    return _make


@pytest.fixture
def fake_docker():
    return FakeDockerCli


@pytest.fixture
def console():
    return RecordingConsole()


@pytest.fixture
def config(tmp_path):
    return DeployConfig(working_dir=str(tmp_path))


@pytest.fixture
def compose_file(tmp_path):
    def _write(content, name="docker-compose.yml"):
        path = tmp_path / name
        path.write_text(content)
        return str(path)
    return _write
