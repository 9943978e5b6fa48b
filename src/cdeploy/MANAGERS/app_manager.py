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
Uninstalling services and managing containers and images of the stack.
"""
import os
from typing import List, Optional
from ..MODELS.deploy_config import DeployConfig
from ..RUNNERS.command_runner import DockerCli
from .deploy_workflow import PreconditionError


class AppManager:
    """
    Removal and listing operations offered by the management menus.
    """
    def __init__(self, config: DeployConfig, docker: Optional[DockerCli] = None):
        self.config = config
        self.docker = docker or DockerCli(config)

    def _require_compose_file(self) -> None:
        if not os.path.isfile(self.config.compose_path):
            raise PreconditionError(f"{self.config.compose_file} does not exist")

    def declared_services(self) -> List[str]:
        """
        :raises PreconditionError: If the compose file is missing.
        """
        self._require_compose_file()
        return self.docker.compose_services()

    def uninstall_all(self) -> None:
        self._require_compose_file()
        self.docker.compose_down()

    def uninstall_service(self, service: str) -> None:
        """Stops and removes the service's containers."""
        self._require_compose_file()
        self.docker.compose_stop(service)
        self.docker.compose_rm(service)

    def containers(self) -> List[str]:
        """Services that currently have containers."""
        self._require_compose_file()
        return self.docker.compose_ps_services()

    def remove_container(self, service: str) -> None:
        """Stops and removes the service container with its anonymous volumes."""
        self._require_compose_file()
        self.docker.compose_rm(service, stop=True, volumes=True)

    def images(self) -> List[str]:
        return self.docker.list_images()

    def remove_image(self, reference: str) -> None:
        self.docker.remove_image(reference)
