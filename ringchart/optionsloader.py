# ringchart/optionsloader.py
from __future__ import annotations
import numbers
from typing import Any, Callable, Dict, List, Optional, Tuple
import yaml
from ringchart import logging as rlog
from ringchart.labels import LABEL_DIRECTIONS

_SUPPORTED_CONFIG_VERSIONS = {"1"}

CLASS_NAME_ROLES = ("chart", "series", "slice", "donut", "label")

# key -> accepted python types (None is always accepted for nullable keys)
_OPTION_TYPES: Dict[str, Tuple[type, ...]] = {
    "width": (numbers.Real, str),
    "height": (numbers.Real, str),
    "chart_padding": (numbers.Real,),
    "class_names": (dict,),
    "start_angle": (numbers.Real,),
    "total": (numbers.Real,),
    "donut": (bool,),
    "donut_width": (numbers.Real,),
    "show_label": (bool,),
    "label_offset": (numbers.Real,),
    "label_interpolation_fnc": (),
    "label_overflow": (bool,),
    "label_direction": (str,),
}
_NULLABLE = {"width", "height", "total"}

OPTION_KEYS = frozenset(_OPTION_TYPES)


def make_label_formatter(fmt: str) -> Callable[[Any, int], str]:
    """
    Turn a 'label_format' string like '{value}%' into a label interpolation function.

    Format specs apply to the raw label: '{value:.1f}' suits numeric series
    values but not string labels from the data, which fail at render time
    with a ValueError naming the label.
    """
    if not isinstance(fmt, str):
        raise TypeError("label_format must be a string")
    try:
        fmt.format(value=0, index=0)
    except (KeyError, IndexError, ValueError) as e:
        raise ValueError(f"label_format '{fmt}' is invalid: {e}") from e

    def _format(value: Any, index: int) -> str:
        try:
            return fmt.format(value=value, index=index)
        except (ValueError, TypeError) as e:
            raise ValueError(f"label_format '{fmt}' cannot format label {value!r} at index {index}: {e}") from e

    _format.__name__ = "label_format"
    return _format


def validate_options(options: Optional[Dict[str, Any]], *, where: str = "options") -> Dict[str, Any]:
    """
    Check a (partial) chart options dict. Unknown keys, wrong value types,
    bad class name roles and unknown label directions raise right away.
    Returns the dict unchanged.
    """
    if options is None:
        return {}
    if not isinstance(options, dict):
        raise TypeError(f"{where} must be a dict, got {type(options).__name__}")

    unknown = sorted(set(options) - OPTION_KEYS)
    if unknown:
        raise ValueError(f"{where}: unknown option(s) {unknown}. Known: {sorted(OPTION_KEYS)}")

    for key, value in options.items():
        if value is None:
            if key in _NULLABLE:
                continue
            raise ValueError(f"{where}.{key} must not be null")
        if key == "label_interpolation_fnc":
            if not callable(value):
                raise TypeError(f"{where}.label_interpolation_fnc must be callable")
            continue
        accepted = _OPTION_TYPES[key]
        # bool is an int subclass; keep numbers and flags apart
        if isinstance(value, bool) and bool not in accepted:
            raise TypeError(f"{where}.{key} must be a number, got bool")
        if not isinstance(value, accepted):
            raise TypeError(f"{where}.{key} has unexpected type {type(value).__name__}")

    cn = options.get("class_names")
    if cn is not None:
        for role, token in cn.items():
            if role not in CLASS_NAME_ROLES:
                raise ValueError(f"{where}.class_names: unknown role '{role}'. Allowed: {list(CLASS_NAME_ROLES)}")
            if not isinstance(token, str) or not token.strip():
                raise ValueError(f"{where}.class_names.{role} must be a non-empty string")

    direction = options.get("label_direction")
    if direction is not None and direction not in LABEL_DIRECTIONS:
        raise ValueError(f"{where}.label_direction must be one of {list(LABEL_DIRECTIONS)}, got '{direction}'")

    return options


class OptionsLoader:
    """
    Loads a YAML chart config:
      config_version: "1"
      options:    { <chart options>, label_format?: "{value} ({index})" }
      responsive:
        - media: "screen and (max-width: 640px)"
          options: { <partial chart options> }

    Notes:
      - label_format is turned into label_interpolation_fnc.
      - responsive entries keep file order (later entries win when they match).
      - strict=False downgrades non-fatal problems (empty responsive entries,
        unexpected top-level keys) to warnings.
    """

    def __init__(self, yaml_path: str, *, strict: bool = True):
        self.yaml_path = yaml_path
        self.strict = strict

    def _warn_or_raise(self, msg: str, *, fatal: bool = False) -> None:
        if fatal or self.strict:
            rlog.log_err(msg)
            raise ValueError(msg)
        rlog.log_warn(msg)

    def _normalize_options(self, raw: Any, where: str) -> Dict[str, Any]:
        if raw is None:
            return {}
        if not isinstance(raw, dict):
            self._warn_or_raise(f"{where} must be a mapping.", fatal=True)
        opts = dict(raw)

        fmt = opts.pop("label_format", None)
        if fmt is not None:
            if "label_interpolation_fnc" in opts:
                self._warn_or_raise(f"{where}: use label_format, not label_interpolation_fnc.", fatal=True)
            try:
                opts["label_interpolation_fnc"] = make_label_formatter(fmt)
            except (TypeError, ValueError) as e:
                self._warn_or_raise(f"{where}: {e}", fatal=True)

        try:
            validate_options(opts, where=where)
        except (TypeError, ValueError) as e:
            self._warn_or_raise(str(e), fatal=True)
        return opts

    def _normalize_responsive(self, raw: Any) -> List[Tuple[str, Dict[str, Any]]]:
        if raw is None:
            return []
        if not isinstance(raw, list):
            self._warn_or_raise("responsive must be a list of {media, options} entries.", fatal=True)

        out: List[Tuple[str, Dict[str, Any]]] = []
        for idx, item in enumerate(raw):
            where = f"responsive[{idx}]"
            if not isinstance(item, dict):
                self._warn_or_raise(f"{where} must be a mapping.", fatal=True)
            media = str(item.get("media") or "").strip()
            if not media:
                self._warn_or_raise(f"{where}: 'media' is mandatory.", fatal=True)
            opts = self._normalize_options(item.get("options"), f"{where}.options")
            if not opts:
                self._warn_or_raise(f"{where}: no options given for '{media}'; entry skipped.")
                continue
            out.append((media, opts))
        return out

    def load(self) -> Dict[str, Any]:
        with open(self.yaml_path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
        if not isinstance(raw, dict):
            self._warn_or_raise("Chart config root must be a mapping.", fatal=True)

        version = str(raw.get("config_version", "")).strip()
        if version not in _SUPPORTED_CONFIG_VERSIONS:
            self._warn_or_raise(
                f"Unsupported or missing config_version '{version}'. Supported: {sorted(_SUPPORTED_CONFIG_VERSIONS)}",
                fatal=True,
            )

        extra = sorted(set(raw) - {"config_version", "options", "responsive"})
        if extra:
            self._warn_or_raise(f"Unexpected top-level key(s) {extra} ignored.")

        options = self._normalize_options(raw.get("options"), "options")
        responsive = self._normalize_responsive(raw.get("responsive"))
        rlog.log_debug(f"Config {self.yaml_path}: {len(options)} option(s), {len(responsive)} responsive entr(y/ies)")

        return {"options": options, "responsive": responsive}
