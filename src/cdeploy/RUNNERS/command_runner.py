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
Execution of docker and docker-compose commands.
"""
import shlex
import shutil
import subprocess
from dataclasses import dataclass
from typing import List, Optional, Sequence
from ..MODELS.deploy_config import DeployConfig
from ..UTILS.console import Console


class CommandError(RuntimeError):
    """
    An external command could not be started or exited non-zero.
    """
    def __init__(self, command: Sequence[str], returncode: Optional[int] = None, stderr: str = ""):
        self.command = list(command)
        self.returncode = returncode
        self.stderr = stderr
        detail = stderr.strip() or (f"exit code {returncode}" if returncode is not None else "not found")
        super().__init__(f"Command failed: {' '.join(self.command)} ({detail})")


@dataclass
class CommandResult:
    """Outcome of one external command."""
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def lines(self) -> List[str]:
        """Non-blank output lines, stripped."""
        return [line.strip() for line in self.stdout.splitlines() if line.strip()]


class CommandRunner:
    """
    Runs a command to completion and returns its output.
    """
    def __init__(self, console: Optional[Console] = None, verbose: bool = False):
        """
        Args:
            console (Optional[Console]): Where verbose command echoes go.
            verbose (bool): Echo every command before it runs.
        """
        self.console = console or Console()
        self.verbose = verbose

    def run(self, command: List[str], check: bool = False, capture: bool = True) -> CommandResult:
        """
        Runs the command.

        Args:
            command (List[str]): Command and arguments to execute.
            check (bool): Raise CommandError on a non-zero exit code.
            capture (bool): Capture stdout/stderr instead of passing them through.

        Returns:
            CommandResult: Exit code and captured output.
        """
        if self.verbose:
            self.console.command(command[0], command)

        try:
            proc = subprocess.run(
                command,
                stdout=subprocess.PIPE if capture else None,
                stderr=subprocess.PIPE if capture else None,
                text=True,
                shell=False
            )
        except FileNotFoundError:
            raise CommandError(command)

        result = CommandResult(proc.returncode, proc.stdout or "", proc.stderr or "")
        if check and not result.ok:
            raise CommandError(command, result.returncode, result.stderr)
        return result


class DockerCli:
    """
    The docker / docker-compose primitives used by the tool.
    Queries capture output; mutating compose calls stream to the terminal.
    """
    def __init__(self, config: DeployConfig, runner: Optional[CommandRunner] = None):
        self.config = config
        self.runner = runner or CommandRunner(verbose=config.verbose)

    def _compose(self, *args: str) -> List[str]:
        return self.config.compose_argv() + list(args)

    def _docker(self, *args: str) -> List[str]:
        return self.config.docker_argv() + list(args)

    # -- compose --

    def compose_installed(self) -> bool:
        """True when the compose command resolves and answers ``version``."""
        argv = shlex.split(self.config.compose_command)
        if not argv or shutil.which(argv[0]) is None:
            return False
        return self.runner.run(argv + ["version"]).ok

    def compose_config_valid(self) -> bool:
        return self.runner.run(self._compose("config", "-q")).ok

    def compose_services(self) -> List[str]:
        return self.runner.run(self._compose("config", "--services"), check=True).lines()

    def compose_container_id(self, service: str) -> Optional[str]:
        lines = self.runner.run(self._compose("ps", "-q", service)).lines()
        return lines[0] if lines else None

    def compose_up(self, service: str, force_recreate: bool = False) -> None:
        args = ["up", "-d"]
        if force_recreate:
            args.append("--force-recreate")
        self.runner.run(self._compose(*args, service), check=True, capture=False)

    def compose_down(self) -> None:
        self.runner.run(self._compose("down"), check=True, capture=False)

    def compose_stop(self, service: str) -> None:
        self.runner.run(self._compose("stop", service), check=True, capture=False)

    def compose_rm(self, service: str, stop: bool = False, volumes: bool = False) -> None:
        args = ["rm", "-f"]
        if stop:
            args.append("-s")
        if volumes:
            args.append("-v")
        self.runner.run(self._compose(*args, service), check=True, capture=False)

    def compose_ps_services(self) -> List[str]:
        return self.runner.run(self._compose("ps", "--services"), check=True).lines()

    # -- docker --

    def container_names(self) -> List[str]:
        return self.runner.run(self._docker("ps", "-a", "--format", "{{.Names}}"), check=True).lines()

    def container_name(self, container_id: str) -> Optional[str]:
        result = self.runner.run(self._docker("inspect", "--format", "{{.Name}}", container_id))
        if not result.ok or not result.lines():
            return None
        return result.lines()[0].lstrip("/") or None

    def image_exists(self, tag: str) -> bool:
        return self.runner.run(self._docker("image", "inspect", tag)).ok

    def load_image(self, path: str, quiet: bool = True) -> bool:
        return self.runner.run(self._docker("load", "-i", path), capture=quiet).ok

    def list_images(self) -> List[str]:
        return self.runner.run(
            self._docker("images", "--format", "{{.Repository}}:{{.Tag}}"), check=True
        ).lines()

    def remove_image(self, reference: str) -> None:
        self.runner.run(self._docker("rmi", "-f", reference), check=True, capture=False)
