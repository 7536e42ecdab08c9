import pathlib

import jinja2
from dependency_injector.containers import DeclarativeContainer
from dependency_injector.providers import Configuration, Provider, ThreadSafeSingleton

from gradeflow.core import di


class TemplateContainer(DeclarativeContainer):
    @staticmethod
    @di.inject
    def provide_text_env(template_path: str, root_path: pathlib.Path = di.Provide["root"]) -> jinja2.Environment:
        """Provide the Jinja2 environment for plain-text summaries.

        Output is never HTML, so autoescape is off and block whitespace is
        trimmed.
        """
        import gradeflow.lib.json

        env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(root_path.joinpath(template_path)),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            undefined=jinja2.StrictUndefined,
        )
        env.policies.update({
            "json.dumps_function": gradeflow.lib.json.dumps,
        })
        return env

    config: Configuration = Configuration(strict=True)
    text: Provider[jinja2.Environment] = ThreadSafeSingleton(provide_text_env, config.path)
