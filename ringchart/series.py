# ringchart/series.py
from __future__ import annotations
import json
import numbers
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Union

from ringchart import logging as rlog


@dataclass(frozen=True)
class SeriesValue:
    value: Union[int, float]
    class_name: Optional[str] = None
    label: Optional[Any] = None


ChartData = Union[Sequence[Any], Dict[str, Any]]


def _as_number(raw: Any, idx: int) -> Union[int, float]:
    # keep ints as ints so default labels read "10", not "10.0"
    if isinstance(raw, bool) or not isinstance(raw, numbers.Real):
        raise TypeError(f"Series #{idx} value must be a number, got {type(raw).__name__}")
    return raw


def _series_value(item: Any, idx: int) -> SeriesValue:
    if isinstance(item, SeriesValue):
        return SeriesValue(_as_number(item.value, idx), item.class_name, item.label)
    if isinstance(item, dict):
        if "value" in item:
            raw = item["value"]
        elif "data" in item:
            raw = item["data"]
        else:
            raise KeyError(f"Series #{idx} has neither 'value' nor 'data'")
        class_name = item.get("class_name", item.get("className"))
        if class_name is not None and not isinstance(class_name, str):
            raise TypeError(f"Series #{idx} class_name must be a string")
        return SeriesValue(_as_number(raw, idx), class_name or None, item.get("label"))
    return SeriesValue(_as_number(item, idx))


def normalize_series(data: ChartData) -> List[SeriesValue]:
    """
    Accepts a plain list of numbers / records, or {"series": [...], "labels": [...]}.
    Data-level labels fill in for records without their own label.
    """
    labels: Sequence[Any] = ()
    if isinstance(data, dict):
        if "series" not in data:
            raise KeyError("Chart data is missing 'series'")
        series = data["series"]
        labels = data.get("labels") or ()
    else:
        series = data

    if isinstance(series, (str, bytes)) or not isinstance(series, Sequence):
        raise TypeError(f"Chart series must be a list, got {type(series).__name__}")

    out: List[SeriesValue] = []
    for idx, item in enumerate(series):
        sv = _series_value(item, idx)
        if sv.label is None and idx < len(labels):
            sv = SeriesValue(sv.value, sv.class_name, labels[idx])
        out.append(sv)
    return out


def get_data_array(series: Sequence[SeriesValue]) -> List[Union[int, float]]:
    return [s.value for s in series]


def load_data(json_path: str) -> Dict[str, Any]:
    """
    Read chart data from JSON. The root is either a list of series values or
    an object with 'series' (and optional 'labels'). Always returns the object form.
    """
    with open(json_path, "r", encoding="utf-8") as f:
        raw = json.load(f)

    if isinstance(raw, list):
        raw = {"series": raw}
    if not isinstance(raw, dict):
        raise TypeError(f"Chart data root must be a list or object, got {type(raw).__name__}")

    labels = raw.get("labels")
    if labels is not None and not isinstance(labels, list):
        raise TypeError("'labels' must be a list")

    # validate eagerly so errors point at the file, not at render time
    series = normalize_series(raw)
    if labels is not None and len(labels) != len(series):
        rlog.log_warn(f"{json_path}: {len(labels)} label(s) for {len(series)} series value(s)")

    return {"series": list(raw["series"]), **({"labels": labels} if labels is not None else {})}
