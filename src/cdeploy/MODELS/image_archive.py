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
Models for exported image archives and the outcome of loading them.
"""
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field
import os


class ArchiveManifestEntry(BaseModel):
    """
    One element of the ``manifest.json`` list written by ``docker save``.
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    config: Optional[str] = Field(default=None, alias="Config")
    repo_tags: Optional[List[str]] = Field(default=None, alias="RepoTags")
    layers: List[str] = Field(default_factory=list, alias="Layers")


class ImageArchive(BaseModel):
    """
    A packaged image bundle on disk. ``repo_tag`` is the first
    ``repository:tag`` found in its manifest, if any.
    """
    path: str
    repo_tag: Optional[str] = None

    @property
    def name(self) -> str:
        return os.path.basename(self.path)


class LoadOutcome(str, Enum):
    """
    What happened to a single archive.
    """
    SKIPPED = "skipped"
    LOADED = "loaded"
    LOADED_UNTAGGED = "loaded_untagged"
    FAILED_UNTAGGED = "failed_untagged"
    FAILED = "failed"


class ArchiveLoadResult(BaseModel):
    archive: ImageArchive
    outcome: LoadOutcome
    message: str = ""


class LoadReport(BaseModel):
    """
    Per-archive results of a load batch, in processing order.
    ``halted`` is set when a tagged load failed and the rest were not tried.
    """
    results: List[ArchiveLoadResult] = []
    halted: bool = False

    @property
    def ok(self) -> bool:
        return not any(r.outcome == LoadOutcome.FAILED for r in self.results)

    def count(self, outcome: LoadOutcome) -> int:
        return sum(1 for r in self.results if r.outcome == outcome)

    def summary(self) -> str:
        """One-line tally, e.g. ``2 loaded, 1 skipped, 0 failed``."""
        loaded = self.count(LoadOutcome.LOADED) + self.count(LoadOutcome.LOADED_UNTAGGED)
        failed = self.count(LoadOutcome.FAILED) + self.count(LoadOutcome.FAILED_UNTAGGED)
        text = f"{loaded} loaded, {self.count(LoadOutcome.SKIPPED)} skipped, {failed} failed"
        if self.halted:
            text += " (batch stopped)"
        return text
