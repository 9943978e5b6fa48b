# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
End-to-end deployment: precondition checks, archive loading, reconciliation.
"""
import os
from dataclasses import dataclass
from typing import List, Optional
import yaml
from ..MODELS.deploy_config import DeployConfig
from ..MODELS.image_archive import LoadOutcome, LoadReport
from ..MODELS.service_spec import ComposeProject, ReconcileAction, ReconcileReport
from ..PARSERS.compose_parser import ComposeParser
from ..REGISTRY.image_reference import ImageReference
from ..RUNNERS.command_runner import DockerCli
from ..UTILS.console import Console
from .image_loader import ImageLoader
from .service_reconciler import ConfirmRecreate, ServiceReconciler


class PreconditionError(RuntimeError):
    """
    The environment is not ready for the requested operation.
    """


@dataclass
class DeployResult:
    """What a deployment did. ``load_report`` is None when loading was skipped."""
    load_report: Optional[LoadReport] = None
    reconcile_report: Optional[ReconcileReport] = None

    @property
    def ok(self) -> bool:
        if self.load_report is not None and not self.load_report.ok:
            return False
        return self.reconcile_report is not None and self.reconcile_report.ok

    def failures(self) -> List[str]:
        """Archives and services that failed, in processing order."""
        failed = []
        if self.load_report is not None:
            failed += [f"archive {r.archive.name}" for r in self.load_report.results
                       if r.outcome == LoadOutcome.FAILED]
        if self.reconcile_report is not None:
            failed += [f"service {d.service}" for d in self.reconcile_report.decisions
                       if d.action == ReconcileAction.FAILED]
        return failed

    def summary(self) -> str:
        if self.ok:
            return "Deployment finished"
        return "Deployment failed: " + (", ".join(self.failures()) or "nothing was deployed")


def uses_remote_images(project: ComposeProject) -> bool:
    """
    True when every declared image is pulled from a registry path,
    i.e. there is nothing to load from local archives.
    """
    images = project.images
    if not images:
        return False
    for image in images:
        try:
            if not ImageReference.parse(image).is_remote:
                return False
        except ValueError:
            return False
    return True


def check_compose_file(config: DeployConfig, docker: DockerCli) -> ComposeProject:
    """
    Validates that the compose file exists and is well formed.

    :return: The parsed project.
    :raises PreconditionError: If the file is missing or invalid.
    """
    path = config.compose_path
    if not os.path.isfile(path):
        raise PreconditionError(f"{config.compose_file} does not exist")
    try:
        project = ComposeParser().parse(path)
    except (yaml.YAMLError, ValueError) as e:
        raise PreconditionError(f"{config.compose_file} is not a valid compose file: {e}")
    if not docker.compose_config_valid():
        raise PreconditionError(f"{config.compose_file} is not a valid compose file")
    return project


class DeployWorkflow:
    """
    Deploys the compose stack found in the configured directory.
    """
    def __init__(self,
                 config: DeployConfig,
                 docker: Optional[DockerCli] = None,
                 confirm: Optional[ConfirmRecreate] = None,
                 console: Optional[Console] = None):
        """
        :param config: Session configuration.
        :param docker: Command surface, built from config when omitted.
        :param confirm: Recreate confirmation handed to the reconciler.
        :param console: Output for progress messages.
        """
        self.config = config
        self.console = console or Console()
        self.docker = docker or DockerCli(config)
        self.loader = ImageLoader(config, self.docker, self.console)
        self.reconciler = ServiceReconciler(self.docker, confirm, self.console)

    def check_preconditions(self) -> ComposeProject:
        """
        :raises PreconditionError: If compose is missing or the compose file is invalid.
        """
        if not self.docker.compose_installed():
            raise PreconditionError(f"{self.config.compose_command} is not installed")
        return check_compose_file(self.config, self.docker)

    def run(self) -> DeployResult:
        """
        Runs the deployment. Containers are not touched if loading fails.
        """
        project = self.check_preconditions()
        result = DeployResult()

        if uses_remote_images(project):
            self.console.info("Images are pulled from a registry, skipping archive loading")
        else:
            self.console.info("Images are local, loading them from archives")
            result.load_report = self.loader.load_all()
            if not result.load_report.ok:
                self.console.error("Image loading failed, deployment stopped")
                return result

        result.reconcile_report = self.reconciler.reconcile()
        return result
