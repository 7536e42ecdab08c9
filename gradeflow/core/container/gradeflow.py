from __future__ import annotations

import sys
import types
from pathlib import Path

import pydantic as p
from dependency_injector.containers import DeclarativeContainer
from dependency_injector.providers import Configuration, Container, Object, Provider, Resource, Singleton

import gradeflow
from gradeflow.model import BaseModel, DeploymentEnvironment

from ..config import Secrets, Settings
from ..di import NotReady
from ..provider import LoggingProvider
from .grading import GradingContainer
from .storage import StorageContainer
from .template import TemplateContainer

# packages holding `di.Provide` defaults, wired whether or not they are imported yet
WiredPackages = ("gradeflow.behaviour", "gradeflow.grading", "gradeflow.storage")


class BootConfiguration(BaseModel):
    debug: bool
    env: DeploymentEnvironment
    config_root: p.AnyUrl
    secrets_path: p.AnyUrl | None = None
    override: tuple[str, ...]


class GradeflowContainer(DeclarativeContainer):
    config: Configuration = Configuration()
    secrets: Configuration = Configuration()

    debug: Provider[bool] = Singleton(bool)
    env: Provider[DeploymentEnvironment] = Singleton(DeploymentEnvironment)
    root: Object[NotReady | Path] = Object(NotReady())

    logging: Provider[LoggingProvider] = Resource(LoggingProvider, config=config.logging, debug=debug)
    storage: Provider[StorageContainer] = Container(
        StorageContainer, config=config.storage, secrets=secrets, logging=logging, root=root
    )
    template: Provider[TemplateContainer] = Container(TemplateContainer, config=config.template)
    grading: Provider[GradingContainer] = Container(GradingContainer, config=config.grading)

    _boot_config: Provider[BootConfiguration | NotReady] = Object(NotReady())

    @staticmethod
    def boot(
        ct: GradeflowContainer,
        /,
        debug: bool,
        env: DeploymentEnvironment,
        config_root: p.FileUrl,
        secrets_path: p.AnyUrl | None = None,
        override: tuple[str, ...] | None = None,
        wiring: tuple[str | types.ModuleType, ...] | None = None,
    ) -> None:
        """Load settings and secrets into the container and wire injection sites.

        Must run before any `di.Provide` default is resolved.
        """
        for name, url in (("config root", config_root), ("secrets path", secrets_path)):
            if url is not None and url.scheme != "file":
                raise ValueError(f"unsupported scheme for {name}: {url.scheme}")

        boot_config = BootConfiguration(
            debug=debug, env=env, config_root=config_root, secrets_path=secrets_path, override=override or ()
        )
        ct.config.from_pydantic(Settings(env=env, root=config_root, override=boot_config.override))
        ct.secrets.from_pydantic(Secrets(env=env, root=secrets_path or config_root))
        ct.debug.override(debug)
        ct.env.override(env)
        ct.root.override(Path(gradeflow.__file__).resolve().parents[1])
        ct._boot_config.override(boot_config)

        ct.wire(packages=list(WiredPackages))
        modules = [m for name, m in sys.modules.items() if name.startswith("gradeflow.")]
        ct.wire(modules=[*modules, *(wiring or ())])

        logger = ct.logging().get_logger()
        for ov in boot_config.override:
            key, value = ov.split("=", 1)
            logger.info("overriding configuration parameter", extra={"key": key, "value": value})
        logger.trace("wired modules", extra={"modules": sorted(m.__name__ for m in modules)})
        logger.debug("configuration finished", extra={"config": str(config_root), "env": env.value})
