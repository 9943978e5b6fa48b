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
Image reference parsing.
Splits references like 'myapp:1.0' or 'registry.example.com:5000/team/app:2'
and tells registry-hosted images apart from locally loaded ones.
"""

from typing import Optional
from dataclasses import dataclass


@dataclass
class ImageReference:
    """
    Parsed image reference.

    Examples:
        - myapp -> repository 'myapp', tag 'latest', local
        - myapp:1.0 -> repository 'myapp', tag '1.0', local
        - team/app:v1 -> namespace path, remote
        - localhost:5000/app@sha256:abc... -> registry host, remote
    """

    repository: str
    registry: Optional[str] = None
    tag: Optional[str] = None
    digest: Optional[str] = None

    DEFAULT_TAG = "latest"

    @classmethod
    def parse(cls, reference: str) -> "ImageReference":
        """
        Parse an image reference string.

        Args:
            reference: Image reference (e.g. 'nginx:latest', 'myuser/myimage:v1')

        Returns:
            Parsed ImageReference object.
        """
        reference = (reference or "").strip()
        if not reference:
            raise ValueError("Empty image reference")

        digest = None
        if "@" in reference:
            reference, digest = reference.rsplit("@", 1)

        # A colon followed by a slash belongs to a registry port, not a tag
        tag = None
        last_colon = reference.rfind(":")
        if last_colon != -1 and "/" not in reference[last_colon + 1:]:
            tag = reference[last_colon + 1:]
            reference = reference[:last_colon]

        registry = None
        parts = reference.split("/")
        first = parts[0]
        if len(parts) > 1 and ("." in first or ":" in first or first == "localhost"):
            registry = first
            reference = "/".join(parts[1:])

        if not reference or tag == "":
            raise ValueError(f"Invalid image reference: {reference!r}")

        if tag is None and digest is None:
            tag = cls.DEFAULT_TAG

        return cls(repository=reference, registry=registry, tag=tag, digest=digest)

    @property
    def is_remote(self) -> bool:
        """True when the image lives under a registry host or a namespace path."""
        return self.registry is not None or "/" in self.repository

    @property
    def repo_tag(self) -> str:
        """'repository:tag' as shown by ``docker images``."""
        name = f"{self.registry}/{self.repository}" if self.registry else self.repository
        if self.digest:
            return f"{name}@{self.digest}"
        return f"{name}:{self.tag}"

    def __str__(self) -> str:
        return self.repo_tag

    def __repr__(self) -> str:
        return f"ImageReference({self.repo_tag})"
