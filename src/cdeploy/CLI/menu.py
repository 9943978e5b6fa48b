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
Interactive main menu and its sub menus.
"""
from typing import Callable, Optional
import click
from ..MODELS.deploy_config import DeployConfig
from ..MANAGERS.app_manager import AppManager
from ..MANAGERS.deploy_workflow import DeployWorkflow, PreconditionError
from ..RUNNERS.command_runner import CommandError, DockerCli
from ..UTILS.console import Console
from ..UTILS.string_interpolation import InterpolationError
from .selection import SelectionFlow, is_yes

Ask = Callable[[str], str]

RECOVERABLE_ERRORS = (CommandError, PreconditionError, InterpolationError)


def terminal_ask(text: str) -> str:
    """Reads one line; an empty answer is returned as ''."""
    return click.prompt(text, default="", show_default=False, prompt_suffix=" ")


class MainMenu:
    """
    The top-level read-eval loop. Every action runs to completion before
    the menu is shown again; Ctrl+C inside an action returns here.
    """
    def __init__(self,
                 config: DeployConfig,
                 docker: Optional[DockerCli] = None,
                 console: Optional[Console] = None,
                 ask: Optional[Ask] = None):
        self.config = config
        self.console = console or Console()
        self.docker = docker or DockerCli(config)
        self.ask = ask or terminal_ask
        self.manager = AppManager(config, self.docker)

    def run(self) -> int:
        """
        Loops until the user exits.

        :return: Process exit code.
        """
        while True:
            self._print_main()
            try:
                choice = self.ask("Enter a function number:").strip()
            except (click.Abort, EOFError):
                self.console.plain()
                return self._goodbye()

            if choice == "q":
                return self._goodbye()
            action = {"1": self.deploy, "2": self.uninstall, "3": self.manage}.get(choice)
            if action is None:
                self.console.error("Invalid number!")
                continue
            self._guarded(action)

    def _goodbye(self) -> int:
        self.console.info("Goodbye, see you next time!")
        return 0

    def _guarded(self, action: Callable[[], None]) -> None:
        try:
            action()
        except RECOVERABLE_ERRORS as e:
            self.console.error(str(e))
        except (KeyboardInterrupt, click.Abort):
            self.console.plain()
            self.console.error("Operation interrupted! Returning to main menu...")

    def _print_main(self) -> None:
        rule = "=" * 38
        self.console.title(rule)
        self.console.title("Docker compose deployment tool")
        self.console.title(rule)
        self.console.title("1. Deploy application", fg="bright_blue")
        self.console.title("2. Uninstall application", fg="bright_magenta")
        self.console.title("3. Manage application", fg="bright_yellow")
        self.console.title("q. Exit", fg="bright_red")

    # -- actions --

    def confirm_recreate(self, service: str, container: str) -> bool:
        return is_yes(self.ask(f"Force recreate the container of service {service}? (y/n, default skip):"))

    def deploy(self) -> None:
        self.console.title(">>> 1 Deploy application >>>", fg="bright_blue")
        workflow = DeployWorkflow(self.config, self.docker, self.confirm_recreate, self.console)
        result = workflow.run()
        if result.ok:
            self.console.success(result.summary())
        else:
            self.console.error(result.summary())

    def uninstall(self) -> None:
        self.console.title(">>> 2 Uninstall application >>>", fg="bright_magenta")
        services = self.manager.declared_services()
        if not services:
            self.console.error("No services found!")
            return

        flow = SelectionFlow(
            services,
            column="Service",
            select_prompt="Service number to uninstall (Enter uninstalls all):",
            confirm_prompt=lambda s: (
                "Really uninstall all services? (y/n)" if s is None
                else f"Really uninstall service '{s}'? (y/n)"
            ),
            console=self.console,
            allow_all=True,
        )
        result = flow.run(self.ask)
        if not result.confirmed:
            return
        if result.item is None:
            self.manager.uninstall_all()
            self.console.success("All services uninstalled")
        else:
            self.manager.uninstall_service(result.item)
            self.console.success(f"Service '{result.item}' uninstalled")

    def manage(self) -> None:
        while True:
            self.console.title("--- Manage application ---", fg="bright_yellow")
            self.console.title("1 Manage containers", fg="bright_yellow")
            self.console.title("2 Manage images", fg="bright_yellow")
            self.console.title("q Back to main menu", fg="bright_red")
            choice = self.ask("Choose:").strip()
            if choice == "q":
                return
            action = {"1": self.manage_containers, "2": self.manage_images}.get(choice)
            if action is None:
                self.console.error("Invalid option!")
                continue
            try:
                action()
            except RECOVERABLE_ERRORS as e:
                self.console.error(str(e))

    def manage_containers(self) -> None:
        self.console.title(">>> Manage / containers >>>", fg="magenta")
        flow = SelectionFlow(
            self.manager.containers(),
            column="Container",
            select_prompt="Container number to remove (q to go back):",
            confirm_prompt=lambda s: f"Really stop and remove {s}? (y/N)",
            console=self.console,
            empty_message="No running containers",
        )
        result = flow.run(self.ask)
        if result.confirmed:
            self.manager.remove_container(result.item)
            self.console.success("Done")

    def manage_images(self) -> None:
        self.console.title(">>> Manage / images >>>", fg="magenta")
        flow = SelectionFlow(
            self.manager.images(),
            column="Image",
            select_prompt="Image number to remove (q to go back):",
            confirm_prompt=lambda s: f"Really remove {s}? (y/N)",
            console=self.console,
            empty_message="No images available",
        )
        result = flow.run(self.ask)
        if result.confirmed:
            self.manager.remove_image(result.item)
            self.console.success("Image removed")
