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

"""Transformer that delegates detect and transform to external commands.

Plugins are third-party code, so every per-directory and per-artifact failure
is logged and contributes nothing instead of aborting the sweep. The one
exception is ``EnvironmentNotActiveError`` during detect, which is re-raised
so the driver can decide whether to retry, skip, or deactivate the plugin.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING

from shiftkit.config.models import InvalidTransformerConfigError, parse_executable_config
from shiftkit.core.model_types import LogComponent, TransformerState
from shiftkit.environment.environment import new_environment
from shiftkit.exceptions import (
    ContainerEngineError,
    EnvironmentNotActiveError,
    ExecError,
    ExecutionEnvironmentError,
    TransformerInitError,
    TransformerStateError,
)
from shiftkit.logging import structured_extra
from shiftkit.transformer.results import (
    ServicesMap,
    TransformResult,
    inject_default_paths,
    parse_detect_output,
    parse_transform_output,
    template_fallback_mappings,
)

if TYPE_CHECKING:
    from pathlib import Path
    from types import TracebackType

    from shiftkit.compat import Self
    from shiftkit.config.models import ExecutableConfig, TransformerConfig
    from shiftkit.container.selection import ContainerEngineProvider
    from shiftkit.core.types import Artifact, ExecResult
    from shiftkit.environment import EnvInfo, Environment

logger: logging.Logger = logging.getLogger("shiftkit.transformer")

QAReceiver = Callable[[], str]


class ExecutableTransformer:
    """Run a plugin's declared commands in its own environment.

    Args:
        engine_provider: Process-wide container engine provider, required only
            for plugins that must run in a container.
        qa_receiver: Starts the QA RPC receiver and returns its address; used
            when the plugin sets ``enableQA``.
    """

    def __init__(
        self,
        engine_provider: ContainerEngineProvider | None = None,
        qa_receiver: QAReceiver | None = None,
    ) -> None:
        self._provider = engine_provider
        self._qa_receiver = qa_receiver
        self._state = TransformerState.UNINITIALIZED
        self._config: TransformerConfig | None = None
        self._exec_config: ExecutableConfig | None = None
        self._env: Environment | None = None

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    @property
    def state(self) -> TransformerState:
        return self._state

    @property
    def name(self) -> str:
        return self._config.name if self._config else "<uninitialized>"

    @property
    def exec_config(self) -> ExecutableConfig | None:
        return self._exec_config

    def init(self, config: TransformerConfig, env_info: EnvInfo) -> None:
        """Validate the plugin config and open its environment.

        State is only committed once every step succeeded.

        Raises:
            TransformerStateError: If called more than once.
            TransformerInitError: If the config is invalid, the platform is
                unsupported without a container fallback, or the environment
                cannot be prepared.
            ContainerEngineUnavailableError: If containers are allowed but no
                runtime responds; this is fatal for the process.
        """
        if self._state is not TransformerState.UNINITIALIZED:
            raise TransformerStateError(config.name, self._state.value, "init")
        try:
            exec_config = parse_executable_config(config.spec, source=config.name)
        except InvalidTransformerConfigError as exc:
            logger.error(
                "Unable to load config for transformer %s: %s",
                config.name,
                exc.error,
                extra=structured_extra(LogComponent.TRANSFORMER, transformer=config.name),
            )
            raise TransformerInitError(config.name, str(exc.error)) from exc
        qa_address = self._start_qa(config.name) if exec_config.enable_qa else None
        try:
            env = new_environment(
                env_info,
                qa_address=qa_address,
                container=exec_config.container,
                provider=self._provider,
                platforms=exec_config.platforms,
                timeout=exec_config.timeout,
            )
        except TransformerInitError:
            raise
        except (ContainerEngineError, ExecutionEnvironmentError) as exc:
            logger.error(
                "Unable to create exec environment: %s",
                exc,
                extra=structured_extra(LogComponent.TRANSFORMER, transformer=config.name),
            )
            raise TransformerInitError(config.name, str(exc)) from exc
        self._config = config
        self._exec_config = exec_config
        self._env = env
        self._state = TransformerState.INITIALIZED
        logger.debug(
            "Initialised transformer %s (%s)",
            config.name,
            "container" if env.is_container else "host",
            extra=structured_extra(LogComponent.TRANSFORMER, transformer=config.name),
        )

    def _start_qa(self, name: str) -> str | None:
        if self._qa_receiver is None:
            logger.info(
                "No QA receiver available; starting transformer that requires QA without QA",
                extra=structured_extra(LogComponent.TRANSFORMER, transformer=name),
            )
            return None
        try:
            return self._qa_receiver()
        # ignore JUSTIFIED: receivers are external collaborators; QA is optional for the plugin
        except Exception as exc:  # noqa: BLE001
            logger.error(
                "Unable to start QA RPC receiver: %s",
                exc,
                extra=structured_extra(LogComponent.TRANSFORMER, transformer=name),
            )
            logger.info(
                "Starting transformer that requires QA without QA",
                extra=structured_extra(LogComponent.TRANSFORMER, transformer=name),
            )
            return None

    def _require_initialized(self, operation: str) -> tuple[TransformerConfig, ExecutableConfig, Environment]:
        if (
            self._state is not TransformerState.INITIALIZED
            or self._config is None
            or self._exec_config is None
            or self._env is None
        ):
            raise TransformerStateError(self.name, self._state.value, operation)
        return self._config, self._exec_config, self._env

    def get_config(self) -> tuple[TransformerConfig, Environment]:
        config, _, env = self._require_initialized("get config")
        return config, env

    def directory_detect(self, directory: str | Path) -> ServicesMap:
        """Run the detect command against ``directory``.

        Returns:
            Detected services; empty when no detect command is declared or the
            command failed.

        Raises:
            EnvironmentNotActiveError: If the environment is gone.
            TransformerStateError: If the transformer is not initialised.
        """
        config, exec_config, env = self._require_initialized("detect")
        if not exec_config.directory_detect_cmd:
            return {}
        dir_path = os.fspath(directory)
        command = [*exec_config.directory_detect_cmd, env.encode(dir_path)]
        extra = structured_extra(LogComponent.TRANSFORMER, transformer=config.name, path=dir_path)
        try:
            result = env.exec(command)
        except EnvironmentNotActiveError as exc:
            logger.debug("%s", exc, extra=extra)
            raise
        except ExecError as exc:
            logger.error("Detect failed in %s: %s", dir_path, exc, extra=extra)
            return {}
        if result.exit_code != 0:
            _log_unsuccessful("Detect", result, transformer=config.name, path=dir_path)
            return {}
        logger.debug(
            "%s detect succeeded in %s",
            config.name,
            env.decode(command[-1]),
            extra=extra,
        )
        return inject_default_paths(parse_detect_output(result.stdout, dir_path), dir_path)

    def transform(
        self,
        new_artifacts: Sequence[Artifact],
        already_seen_artifacts: Sequence[Artifact] = (),
    ) -> TransformResult:
        """Transform each artifact independently and append the results.

        Failures for one artifact are logged and skipped; this method does not
        raise for plugin failures.

        Raises:
            TransformerStateError: If the transformer is not initialised.
        """
        config, exec_config, env = self._require_initialized("transform")
        del already_seen_artifacts
        aggregate = TransformResult()
        for artifact in new_artifacts:
            if not exec_config.transform_cmd:
                self._append_template_fallback(aggregate, artifact, config, env)
                continue
            path = artifact.service_dir() or ""
            command = [*exec_config.transform_cmd, env.encode(path) if path else ""]
            extra = structured_extra(LogComponent.TRANSFORMER, transformer=config.name, path=path)
            try:
                result = env.exec(command)
            except EnvironmentNotActiveError as exc:
                logger.debug("%s", exc, extra=extra)
                continue
            except ExecError as exc:
                logger.error("Transform failed for %s: %s", path, exc, extra=extra)
                continue
            if result.exit_code != 0:
                _log_unsuccessful("Transform", result, transformer=config.name, path=path)
                continue
            logger.debug("%s transform succeeded in %s", config.name, env.decode(command[-1]), extra=extra)
            try:
                output = parse_transform_output(result.stdout)
            except ValueError as exc:
                logger.error("Unable to parse transform output %r: %s", result.stdout.strip(), exc, extra=extra)
                continue
            aggregate.extend(output)
        return aggregate

    def _append_template_fallback(
        self,
        aggregate: TransformResult,
        artifact: Artifact,
        config: TransformerConfig,
        env: Environment,
    ) -> None:
        templates_dir = env.context / env.env_info.rel_templates_dir
        try:
            mappings = template_fallback_mappings(artifact, source_root=env.source, templates_dir=templates_dir)
        except ValueError as exc:
            logger.error(
                "Unable to convert source path to be relative: %s",
                exc,
                extra=structured_extra(LogComponent.TRANSFORMER, transformer=config.name),
            )
            return
        aggregate.path_mappings.extend(mappings)

    def close(self) -> None:
        """Tear down the environment; further detect/transform calls are rejected."""
        env, self._env = self._env, None
        self._state = TransformerState.DONE
        if env is not None:
            env.destroy()


def _log_unsuccessful(phase: str, result: ExecResult, *, transformer: str, path: str) -> None:
    logger.debug(
        "%s did not succeed (exit=%s): stdout=%r stderr=%r",
        phase,
        result.exit_code,
        result.stdout.strip(),
        result.stderr.strip(),
        extra=structured_extra(LogComponent.TRANSFORMER, transformer=transformer, path=path, exit_code=result.exit_code),
    )


__all__ = ["ExecutableTransformer", "QAReceiver"]
