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
Reconciles the services declared in a compose file with existing containers.
"""
from typing import Callable, Optional, Set
from ..MODELS.service_spec import ReconcileAction, ReconcileReport, ServiceDecision
from ..RUNNERS.command_runner import CommandError, DockerCli
from ..UTILS.console import Console

# (service, container_name) -> recreate?
ConfirmRecreate = Callable[[str, str], bool]


def never_recreate(service: str, container: str) -> bool:
    return False


class ServiceReconciler:
    """
    Creates missing service containers and, on confirmation, recreates
    existing ones. Services are handled one at a time in declaration order.
    """
    def __init__(self,
                 docker: DockerCli,
                 confirm: Optional[ConfirmRecreate] = None,
                 console: Optional[Console] = None):
        """
        :param docker: Access to compose and the container runtime.
        :param confirm: Asked whether to force-recreate an existing container.
            Defaults to never recreating.
        :param console: Output for progress messages.
        """
        self.docker = docker
        self.confirm = confirm or never_recreate
        self.console = console or Console()

    def reconcile(self) -> ReconcileReport:
        """
        Runs one reconciliation pass.

        The container snapshot is taken once up front; containers that appear
        or disappear while the pass runs are not noticed.

        :return: The decision made for every declared service.
        """
        services = self.docker.compose_services()
        existing = set(self.docker.container_names())

        report = ReconcileReport()
        for service in services:
            report.decisions.append(self._reconcile_service(service, existing))
        return report

    def bound_container(self, service: str) -> Optional[str]:
        """
        Name of the container compose currently associates with the service.
        """
        container_id = self.docker.compose_container_id(service)
        if not container_id:
            return None
        return self.docker.container_name(container_id)

    def _reconcile_service(self, service: str, existing: Set[str]) -> ServiceDecision:
        self.console.step(f"Checking service: {service}")
        container = None
        try:
            container = self.bound_container(service)
            if not container or container not in existing:
                self.console.info(f"No container for service {service}, creating...")
                self.docker.compose_up(service)
                self.console.success(f"Container for service {service} created")
                return ServiceDecision(service=service, action=ReconcileAction.CREATE)

            self.console.warning(f"Container {container} for service {service} already exists")
            if self.confirm(service, container):
                self.console.info(f"Recreating container for service {service}...")
                self.docker.compose_up(service, force_recreate=True)
                self.console.success(f"Container for service {service} recreated")
                return ServiceDecision(service=service, action=ReconcileAction.RECREATE, container_name=container)

            self.console.info(f"Leaving container for service {service} untouched")
            return ServiceDecision(service=service, action=ReconcileAction.SKIP, container_name=container)
        except CommandError as e:
            self.console.error(str(e))
            return ServiceDecision(
                service=service,
                action=ReconcileAction.FAILED,
                container_name=container,
                message=str(e)
            )
