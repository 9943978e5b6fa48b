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
Loading of exported image archives into the local image store.
"""
import os
from typing import List, Optional
from ..MODELS.deploy_config import DeployConfig
from ..MODELS.image_archive import ArchiveLoadResult, ImageArchive, LoadOutcome, LoadReport
from ..PARSERS.manifest_reader import ManifestReader
from ..RUNNERS.command_runner import DockerCli
from ..UTILS.console import Console


class ImageLoader:
    """
    Loads every archive in the working directory exactly once per tag.
    Archives whose tag is already in the image store are skipped.
    """
    def __init__(self, config: DeployConfig, docker: DockerCli, console: Optional[Console] = None):
        """
        Initializes the loader.

        :param config: Session configuration (archive directory and suffix).
        :param docker: Access to the image store.
        :param console: Output for progress messages.
        """
        self.config = config
        self.docker = docker
        self.console = console or Console()

    def discover(self) -> List[ImageArchive]:
        """
        Archives directly inside the archive directory, sorted by file name.
        """
        directory = self.config.archive_dir
        if not os.path.isdir(directory):
            return []
        suffix = self.config.archive_suffix
        paths = sorted(
            os.path.join(directory, entry)
            for entry in os.listdir(directory)
            if entry.endswith(suffix) and os.path.isfile(os.path.join(directory, entry))
        )
        return [ImageArchive(path=p) for p in paths]

    def load_all(self) -> LoadReport:
        """
        Loads all discovered archives.
        A failed load of a tagged archive stops the batch.

        :return: Per-archive results.
        """
        report = LoadReport()
        archives = self.discover()
        if not archives:
            self.console.info(f"No *{self.config.archive_suffix} archives found, nothing to load")
            return report

        for archive in archives:
            result = self.load(archive)
            report.results.append(result)
            if result.outcome == LoadOutcome.FAILED:
                report.halted = True
                break
        self.console.info(f"Archives: {report.summary()}")
        return report

    def load(self, archive: ImageArchive) -> ArchiveLoadResult:
        """
        Loads a single archive unless its tag is already present.
        """
        self.console.step(f"Processing: {archive.name}")
        archive.repo_tag = ManifestReader.first_repo_tag(archive.path)

        if not archive.repo_tag:
            self.console.warning("Unable to determine the image tag, loading anyway...")
            if self.docker.load_image(archive.path, quiet=False):
                self.console.success("Image loaded (tag unknown)")
                return ArchiveLoadResult(archive=archive, outcome=LoadOutcome.LOADED_UNTAGGED)
            self.console.error("Image load failed, the file may be corrupt")
            return ArchiveLoadResult(
                archive=archive,
                outcome=LoadOutcome.FAILED_UNTAGGED,
                message="load failed"
            )

        tag = archive.repo_tag
        if self.docker.image_exists(tag):
            self.console.warning(f"Image {tag} already exists, skipping")
            return ArchiveLoadResult(archive=archive, outcome=LoadOutcome.SKIPPED)

        if self.docker.load_image(archive.path):
            self.console.success(f"Loaded {tag}")
            return ArchiveLoadResult(archive=archive, outcome=LoadOutcome.LOADED)

        self.console.error(f"Failed to load {tag}")
        return ArchiveLoadResult(archive=archive, outcome=LoadOutcome.FAILED, message=f"load of {tag} failed")
