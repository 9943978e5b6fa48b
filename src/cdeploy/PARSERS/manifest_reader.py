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
Reads the manifest embedded in an image archive produced by ``docker save``.
"""
import json
import tarfile
from typing import List, Optional
from pydantic import TypeAdapter, ValidationError
from ..MODELS.image_archive import ArchiveManifestEntry

MANIFEST_NAME = "manifest.json"

_manifest_adapter = TypeAdapter(List[ArchiveManifestEntry])


class ManifestReader:
    """
    Extracts repository tags from image archives.
    Every failure mode (unreadable tar, no manifest, bad JSON, no tags)
    collapses to "no tag" so callers can fall back to a blind load.
    """
    @staticmethod
    def read_manifest(archive_path: str) -> Optional[List[ArchiveManifestEntry]]:
        """
        Returns the parsed manifest, or None if it cannot be read.
        """
        try:
            with tarfile.open(archive_path, 'r:*') as tar:
                try:
                    member = tar.getmember(MANIFEST_NAME)
                except KeyError:
                    return None
                handle = tar.extractfile(member)
                if handle is None:
                    return None
                with handle:
                    raw = handle.read()
        except (tarfile.TarError, OSError):
            return None

        try:
            return _manifest_adapter.validate_python(json.loads(raw))
        except (ValueError, ValidationError):
            return None

    @classmethod
    def first_repo_tag(cls, archive_path: str) -> Optional[str]:
        """
        The first ``repository:tag`` listed in the archive's manifest.

        :param archive_path: Path to the archive.
        :return: The tag, or None when it cannot be determined.
        """
        manifest = cls.read_manifest(archive_path)
        if not manifest:
            return None
        for entry in manifest:
            for tag in entry.repo_tags or []:
                if tag:
                    return tag
        return None
