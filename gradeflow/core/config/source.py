"""Settings sources reading the YAML config tree.

Each top-level settings field is loaded from `<field>.yaml` in the config root,
or from `env.d/<env>/<field>.yaml` when the environment has its own copy.
"""

import functools
import typing as t
from pathlib import Path

import pydantic as p
import yaml
from pydantic_settings import PydanticBaseSettingsSource, SettingsError

from gradeflow.model import DeploymentEnvironment

# init-only fields; never read from files or overrides
SkipKeys = frozenset({"env", "root", "override"})


class CurrentState(t.TypedDict, total=False):
    root: t.Required[p.AnyUrl]
    env: t.Required[DeploymentEnvironment]
    override: tuple[str, ...]


def env_load_paths(state: CurrentState) -> list[Path]:
    """The config root, then the environment's directory beneath it"""
    root = state["root"]
    if root.scheme != "file" or root.path is None:
        raise SettingsError(f"config root {root} is not a local directory")
    base = Path(root.path)
    if state["env"] is DeploymentEnvironment.Local:
        # local settings are the root files themselves
        return [base]
    return [base, base / "env.d" / state["env"].value]


class SettingsSource(PydanticBaseSettingsSource):
    """Collects one value per settings field.

    `get_field_value` raises KeyError when the source has nothing for a
    field; any other failure is reported as a SettingsError naming the field.
    """

    @property
    def state(self) -> CurrentState:
        return t.cast(CurrentState, self.current_state)

    def __call__(self) -> dict[str, t.Any]:
        data: dict[str, t.Any] = {}
        for field_name, field in self.settings_cls.model_fields.items():
            if field_name in SkipKeys:
                continue
            try:
                value, key, is_complex = self.get_field_value(field, field_name)
                data[key] = self.prepare_field_value(field_name, field, value, is_complex)
            except KeyError:
                continue
            except Exception as e:
                raise SettingsError(f"error loading field {field_name!r} from {type(self).__name__}") from e
        return data

    def prepare_field_value(
        self, field_name: str, field: p.fields.FieldInfo, value: t.Any, value_is_complex: bool
    ) -> t.Any:
        return value


class OverrideSettingsSource(SettingsSource):
    """Apply `-o dotted.key=value` overrides on top of the YAML settings.

    Values are parsed as YAML scalars. The partial dicts produced here are
    deep merged by pydantic-settings over the YAML source listed after this one.
    """

    @functools.cached_property
    def parsed_options(self) -> dict[str, t.Any]:
        parsed: dict[str, t.Any] = {}
        for option in self.state.get("override", ()):
            path, _, raw = option.partition("=")
            *parents, leaf = [k.strip() for k in path.split(".")]
            target = parsed
            for key in parents:
                target = target.setdefault(key, {})
            target[leaf] = yaml.safe_load(raw.strip())
        return parsed

    def get_field_value(self, field: p.fields.FieldInfo, field_name: str) -> tuple[t.Any, str, bool]:
        return self.parsed_options[field_name], field_name, False


class YAMLCascadingSettingsSource(SettingsSource):
    """Read `<field>.yaml` for each settings field.

    The environment's copy of a file replaces the root copy outright; the two
    are not merged.
    """

    @functools.cached_property
    def load_paths(self) -> list[Path]:
        return env_load_paths(self.state)

    def get_field_value(self, field: p.fields.FieldInfo, field_name: str) -> tuple[t.Any, str, bool]:
        for path in reversed(self.load_paths):
            fn = path / f"{field_name}.yaml"
            if fn.exists():
                return yaml.safe_load(fn.read_text(encoding="utf8")), field_name, True
        raise KeyError(field_name)


class YAMLSecretsSource(SettingsSource):
    """Read `secrets.d/<field>.yaml` beneath the secrets root.

    Outside the local environment the secrets live in the environment's
    directory, i.e. `env.d/<env>/secrets.d/`.
    """

    @functools.cached_property
    def load_path(self) -> Path:
        return env_load_paths(self.state)[-1] / "secrets.d"

    def get_field_value(self, field: p.fields.FieldInfo, field_name: str) -> tuple[t.Any, str, bool]:
        fn = self.load_path / f"{field_name}.yaml"
        if not fn.exists():
            raise KeyError(field_name)
        return yaml.safe_load(fn.read_text(encoding="utf8")), field_name, True
