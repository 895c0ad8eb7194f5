# Copyright 2025 CrownOps Engineering
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

"""End-to-end runs of real plugin scripts on the host."""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING

import pytest

from shiftkit.config.constants import QA_RPC_ADDRESS_ENV
from shiftkit.config.loader import load_transformer_config
from shiftkit.core.model_types import PathMappingType, TransformerState
from shiftkit.core.types import SERVICE_DIR_PATH_TYPE, TEMPLATE_CONFIG_TYPE, Artifact
from shiftkit.environment import EnvInfo
from shiftkit.exceptions import TransformerStateError
from shiftkit.transformer import create_transformer
from tests.fixtures.builders import executable_config, write_transformer_file

if TYPE_CHECKING:
    from pathlib import Path

    from shiftkit.config.models import TransformerConfig

pytestmark = pytest.mark.integration

# Prints a bare template config for directories holding a Dockerfile.
DETECT_SCRIPT = """
import json, os, sys
directory = sys.argv[1]
if not os.path.exists(os.path.join(directory, "Dockerfile")):
    sys.exit(3)
print(json.dumps({"port": 8080, "name": os.path.basename(directory)}))
"""

# Echoes the QA address it was started with inside the created artifact.
TRANSFORM_SCRIPT = """
import json, os, sys
name = os.path.basename(sys.argv[1])
print(json.dumps({
    "pathMappings": [{"type": "Default", "srcPath": sys.argv[1], "destPath": "deploy/" + name}],
    "createdArtifacts": [{
        "name": name,
        "type": "Deployment",
        "configs": {"QA": {"address": os.environ.get("%s")}},
    }],
}))
""" % QA_RPC_ADDRESS_ENV


@pytest.fixture
def project(tmp_path: Path) -> Path:
    root = tmp_path.resolve() / "project"
    for name in ("api", "docs"):
        (root / name).mkdir(parents=True)
    _ = (root / "api" / "Dockerfile").write_text("FROM scratch\n", encoding="utf-8")
    return root


def _load(tmp_path: Path, project: Path, **config: object) -> tuple[TransformerConfig, EnvInfo]:
    definition = write_transformer_file(tmp_path / "plugin", name="scripted", config=executable_config(**config))
    transformer_config = load_transformer_config(definition)
    env_info = EnvInfo(name="scripted", source=project, context=transformer_config.context)
    return transformer_config, env_info


def test_detect_runs_script_per_directory(tmp_path: Path, project: Path) -> None:
    config, env_info = _load(tmp_path, project, directoryDetectCMD=[sys.executable, "-c", DETECT_SCRIPT])
    with create_transformer(config, env_info) as transformer:
        detected = transformer.directory_detect(project / "api")
        skipped = transformer.directory_detect(project / "docs")
    assert skipped == {}
    [artifact] = detected[""]
    assert artifact.paths == {SERVICE_DIR_PATH_TYPE: [str(project / "api")]}
    assert artifact.configs == {TEMPLATE_CONFIG_TYPE: {"port": 8080, "name": "api"}}
    assert transformer.state is TransformerState.DONE


def test_transform_passes_qa_address_and_collects_results(tmp_path: Path, project: Path) -> None:
    config, env_info = _load(
        tmp_path,
        project,
        enableQA=True,
        transformCMD=[sys.executable, "-c", TRANSFORM_SCRIPT],
    )
    artifacts = [Artifact(paths={SERVICE_DIR_PATH_TYPE: [str(project / name)]}) for name in ("api", "docs")]
    with create_transformer(config, env_info, qa_receiver=lambda: "127.0.0.1:4567") as transformer:
        result = transformer.transform(artifacts, [])
    assert [(item.type, item.dest_path) for item in result.path_mappings] == [
        (PathMappingType.DEFAULT, "deploy/api"),
        (PathMappingType.DEFAULT, "deploy/docs"),
    ]
    assert [item.name for item in result.created_artifacts] == ["api", "docs"]
    assert {item.configs["QA"] == {"address": "127.0.0.1:4567"} for item in result.created_artifacts} == {True}


def test_template_fallback_without_transform_command(tmp_path: Path, project: Path) -> None:
    config, env_info = _load(tmp_path, project)
    artifact = Artifact(
        paths={SERVICE_DIR_PATH_TYPE: [str(project / "api")]},
        configs={TEMPLATE_CONFIG_TYPE: {"port": 8080}},
    )
    with create_transformer(config, env_info) as transformer:
        wire = transformer.transform([artifact], []).to_wire()
    assert wire["pathMappings"] == [
        {
            "type": "template",
            "srcPath": str(env_info.templates_dir),
            "destPath": "source/api",
            "templateConfig": {"port": 8080},
        },
        {"type": "source", "srcPath": "", "destPath": "source", "templateConfig": None},
    ]
    assert wire["createdArtifacts"] == []


def test_closed_transformer_rejects_work(tmp_path: Path, project: Path) -> None:
    config, env_info = _load(tmp_path, project, directoryDetectCMD=[sys.executable, "-c", DETECT_SCRIPT])
    transformer = create_transformer(config, env_info)
    transformer.close()
    with pytest.raises(TransformerStateError):
        _ = transformer.directory_detect(project / "api")
