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
Parser for Docker Compose YAML files.
"""
import yaml
from typing import Dict, Any, List, Optional
from dotenv import dotenv_values
from ..MODELS.service_spec import ComposeProject, ServiceSpec
from ..UTILS.string_interpolation import EnvironmentInterpolator
import os


class ComposeParser:
    """
    Parser for docker-compose.yml files.
    """
    def __init__(self, context: Optional[Dict[str, str]] = None):
        """
        Initializes the parser with an optional environment context for interpolation.

        :param context: Variables for interpolation. Defaults to the process
            environment overlaid on the ``.env`` file next to the compose file.
        """
        self.context = context

    def parse(self, compose_path: str) -> ComposeProject:
        """
        Parses a compose file from a path.

        :param compose_path: Path to the compose file.
        :return: Parsed project.
        """
        with open(compose_path, 'r') as f:
            content = f.read()
        context = self.context
        if context is None:
            context = self.default_context(os.path.dirname(os.path.abspath(compose_path)))
        return self.parse_from_string(content, context)

    @staticmethod
    def default_context(project_dir: str) -> Dict[str, str]:
        """
        ``.env`` values from the project directory, overridden by the process environment.
        """
        env_file = os.path.join(project_dir, ".env")
        context: Dict[str, str] = {}
        if os.path.isfile(env_file):
            context.update({k: v for k, v in dotenv_values(env_file).items() if v is not None})
        context.update(os.environ)
        return context

    def parse_from_string(self, content: str, context: Optional[Dict[str, str]] = None) -> ComposeProject:
        """
        Parses a compose file from a string.

        :param content: YAML content of the compose file.
        :param context: Interpolation variables; falls back to the parser's context.
        :return: Parsed project.
        :raises ValueError: If the document has no services mapping.
        """
        if context is None:
            context = self.context if self.context is not None else dict(os.environ)
        data = yaml.safe_load(content)
        if data is None:
            data = {}
        # only values are interpolated; YAML comments and keys are not
        data = EnvironmentInterpolator.interpolate_tree(data, context)
        if not isinstance(data, dict):
            raise ValueError("Compose file must be a mapping at the top level")

        services_spec = data.get('services')
        if not isinstance(services_spec, dict) or not services_spec:
            raise ValueError("Compose file declares no services")

        services = {}
        for name, spec in services_spec.items():
            services[str(name)] = self._parse_service(str(name), spec or {})

        return ComposeProject(
            services=services,
            networks=self._names(data.get('networks')),
            volumes=self._names(data.get('volumes'))
        )

    def _parse_service(self, name: str, spec: Dict[str, Any]) -> ServiceSpec:
        """
        Parses a single service definition from a compose file.

        :param name: The name of the service.
        :param spec: The service specification dictionary.
        :return: A ServiceSpec instance.
        """
        if not isinstance(spec, dict):
            raise ValueError(f"Service '{name}' must be a mapping")

        build = spec.get('build')
        return ServiceSpec(
            name=name,
            image=str(spec.get('image') or ''),
            container_name=spec.get('container_name'),
            build_context=build.get('context') if isinstance(build, dict) else build,
        )

    def _names(self, section: Any) -> List[str]:
        """
        Names declared in a top-level section such as ``networks``.

        :param section: The section value, a mapping or a list.
        :return: A list of names.
        """
        if isinstance(section, dict):
            return [str(k) for k in section]
        if isinstance(section, list):
            return [str(v) for v in section]
        return []
