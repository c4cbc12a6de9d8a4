"""Prepper-backed configuration loader for the i18n codemod."""

from __future__ import annotations

import os
from functools import lru_cache
from itertools import chain
from pathlib import Path
from typing import Any, Iterator, Literal, Mapping, Sequence, Tuple

from dotenv import dotenv_values
from prepper import (
    Field,
    IoError,
    SchemaError,
    SchemaModel,
    ValidationError,
    model_validator,
)
from prepper.config import ConfigInstance
from prepper.loaders import _parse_file, _path_to_source, discover_file_paths
from prepper.merge import merge_layer
from prepper.provenance import ProvenanceRecorder

from .errors import CodemodConfigurationError
from .structures import DEFAULT_TEST_SUFFIXES, CodemodOptions, PrintOptions

APP_NAME = "I18nCodemod"

LINE_TERMINATORS = {"lf": "\n", "crlf": "\r\n"}


class CodemodConfig(SchemaModel):
    """Schema describing all supported configuration options."""

    I18N_CODEMOD_QUOTE: Literal["single", "double"] = Field(
        default="single",
        description="Quote style of generated translation keys.",
    )
    I18N_CODEMOD_TRAILING_COMMA: bool = Field(default=False)
    I18N_CODEMOD_LINE_TERMINATOR: Literal["lf", "crlf"] = Field(
        default="lf",
        description="Line terminator used for inserted lines.",
    )
    I18N_CODEMOD_TEST_SUFFIXES: str = Field(
        default=",".join(DEFAULT_TEST_SUFFIXES),
        description="Comma separated file suffixes that are never transformed.",
    )
    I18N_CODEMOD_IGNORED_CALLEES: str = Field(
        default="require,import",
        description="Comma separated callees whose string arguments are left alone.",
    )
    I18N_CODEMOD_VERBOSE: bool = Field(default=False)
    I18N_CODEMOD_DEBUG: bool = Field(default=False)

    @model_validator(mode="before")
    def _normalise_choices(data: Any) -> Any:
        if isinstance(data, dict):
            quote = data.get("I18N_CODEMOD_QUOTE")
            if isinstance(quote, str):
                normalized = quote.strip().lower()
                synonyms = {"'": "single", '"': "double"}
                data["I18N_CODEMOD_QUOTE"] = synonyms.get(normalized, normalized)
            terminator = data.get("I18N_CODEMOD_LINE_TERMINATOR")
            if isinstance(terminator, str):
                normalized = terminator.strip().lower()
                synonyms = {"\n": "lf", "\\n": "lf", "\r\n": "crlf", "\\r\\n": "crlf"}
                data["I18N_CODEMOD_LINE_TERMINATOR"] = synonyms.get(normalized, normalized)
        return data


Layer = Tuple[Mapping[str, Any], str, str]


def _yaml_layers(app_dir: Path) -> Iterator[Layer]:
    for path, label in discover_file_paths(APP_NAME, "yaml", app_dir=app_dir, extra_paths=None):
        parsed = _parse_file(path, "yaml")
        if not isinstance(parsed, Mapping):
            raise IoError(f"{path}: expected a mapping of settings at the root.")
        yield parsed, _path_to_source(label, "yaml", path), "file"


def _env_layers(app_dir: Path) -> Iterator[Layer]:
    """Yield one layer per known setting, ``.env`` first, then the process."""

    known = set(CodemodConfig.__field_infos__.keys())
    sources = []
    dotenv_path = app_dir / ".env"
    if dotenv_path.exists():
        sources.append((".env", dotenv_values(dotenv_path)))
    sources.append(("process", dict(os.environ)))

    for origin, values in sources:
        for key in sorted(known.intersection(values)):
            value = values[key]
            if isinstance(value, str):
                yield {key: value}, f"env:{origin}:{key}", "env"


@lru_cache(maxsize=1)
def _load_config_instance(app_dir: Path | None = None) -> ConfigInstance:
    """Merge YAML files, ``.env`` and the environment, later layers winning.

    Every setting has a default, so a run without any configuration is valid.
    """

    base_dir = app_dir or Path.cwd()
    provenance = ProvenanceRecorder()
    combined: dict[str, Any] = {}
    try:
        for values, source, layer in chain(_yaml_layers(base_dir), _env_layers(base_dir)):
            merge_layer(combined, values, provenance=provenance, source=source, layer=layer)
        model = CodemodConfig.validate(combined, provenance=provenance)
    except IoError as exc:
        raise CodemodConfigurationError(f"Configuration files could not be read: {exc}") from exc
    except SchemaError as exc:
        raise CodemodConfigurationError(f"Configuration schema error: {exc}") from exc
    except ValidationError as exc:
        raise CodemodConfigurationError(_describe_issues(exc.to_dict())) from exc

    return ConfigInstance(
        model=model,
        provenance=provenance,
        env_prefix=None,
        schema_cls=CodemodConfig,
    )


def _describe_issues(entries: Sequence[dict[str, Any]]) -> str:
    lines = ["Invalid i18n-codemod settings:"]
    for entry in entries:
        path = entry.get("path") or []
        if isinstance(path, (list, tuple)):
            name = ".".join(str(part) for part in path if part)
        else:
            name = str(path)
        message = entry.get("message") or entry.get("msg") or "invalid value"
        line = f"- {name or 'settings'}: {message}"
        if entry.get("source"):
            line += f" (from {entry['source']})"
        lines.append(line)
    return "\n".join(lines)


def split_list(value: str | None) -> tuple[str, ...]:
    """Split a comma separated setting into trimmed, non-empty entries."""

    if not value:
        return ()
    return tuple(part.strip() for part in value.split(",") if part.strip())


def get_config(app_dir: Path | None = None) -> ConfigInstance:
    """Return the immutable configuration instance."""

    return _load_config_instance(app_dir=app_dir)


def get_settings(app_dir: Path | None = None) -> CodemodConfig:
    """Return the validated schema model for typed access."""

    return get_config(app_dir=app_dir).model()


def build_options(
    settings: CodemodConfig | None = None,
    *,
    quote: str | None = None,
    trailing_comma: bool | None = None,
    line_terminator: str | None = None,
    ignored_callees: Sequence[str] | None = None,
) -> CodemodOptions:
    """Resolve settings plus command line overrides into ``CodemodOptions``."""

    if settings is None:
        settings = CodemodConfig.validate({}, provenance=ProvenanceRecorder())

    terminator_name = line_terminator or settings.I18N_CODEMOD_LINE_TERMINATOR
    if terminator_name not in LINE_TERMINATORS:
        raise CodemodConfigurationError(
            f"Unknown line terminator '{terminator_name}'; expected lf or crlf."
        )
    resolved_quote = quote or settings.I18N_CODEMOD_QUOTE
    if resolved_quote not in {"single", "double"}:
        raise CodemodConfigurationError(
            f"Unknown quote style '{resolved_quote}'; expected single or double."
        )

    print_options = PrintOptions(
        quote=resolved_quote,
        trailing_comma=(
            settings.I18N_CODEMOD_TRAILING_COMMA if trailing_comma is None else trailing_comma
        ),
        line_terminator=LINE_TERMINATORS[terminator_name],
    )
    callees = split_list(settings.I18N_CODEMOD_IGNORED_CALLEES)
    if ignored_callees:
        callees = tuple(dict.fromkeys(callees + tuple(ignored_callees)))
    return CodemodOptions(
        print_options=print_options,
        test_suffixes=split_list(settings.I18N_CODEMOD_TEST_SUFFIXES) or DEFAULT_TEST_SUFFIXES,
        ignored_callees=callees,
    )
