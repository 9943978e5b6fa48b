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
Runtime configuration shared by every component.
"""
import os
import shlex
from typing import List
from pydantic import BaseModel, field_validator


class DeployConfig(BaseModel):
    """
    Explicit configuration for a deployment session.
    Paths are resolved against ``working_dir`` rather than the process cwd.
    """
    working_dir: str = "."
    compose_file: str = "docker-compose.yml"
    archive_suffix: str = ".tar"
    docker_command: str = "docker"
    compose_command: str = "docker-compose"
    verbose: bool = False

    @field_validator("archive_suffix")
    @classmethod
    def _dotted_suffix(cls, value: str) -> str:
        if not value:
            raise ValueError("archive_suffix must not be empty")
        return value if value.startswith(".") else f".{value}"

    @field_validator("compose_command", "docker_command")
    @classmethod
    def _non_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("command must not be blank")
        return value

    @property
    def compose_path(self) -> str:
        """Absolute path of the compose file."""
        return os.path.abspath(os.path.join(self.working_dir, self.compose_file))

    @property
    def archive_dir(self) -> str:
        return os.path.abspath(self.working_dir)

    def compose_argv(self) -> List[str]:
        """
        The compose invocation prefix, e.g. ``['docker', 'compose', '-f', path]``.
        """
        return shlex.split(self.compose_command) + ["-f", self.compose_path]

    def docker_argv(self) -> List[str]:
        return shlex.split(self.docker_command)
