# ringchart/responsive.py
from __future__ import annotations
from copy import copy
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from ringchart import logging as rlog
from ringchart.environment import (
    MediaQueryError,
    MediaQueryList,
    Predicate,
    Signal,
    Subscription,
    Viewport,
)

Options = Dict[str, Any]
ResponsiveOption = Tuple[Predicate, Options]
OnChange = Callable[[Options], Any]


def merge_options(base: Options, override: Optional[Options]) -> Options:
    """
    Merge override into a copy of base. Nested dicts (class_names) merge key
    by key, everything else is replaced. An explicit None replaces too.
    Callables and other leaf values are shared, not copied.
    """
    out: Options = {}
    for k, v in (base or {}).items():
        out[k] = dict(v) if isinstance(v, dict) else v
    for k, v in (override or {}).items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = merge_options(out[k], v)
        elif isinstance(v, dict):
            out[k] = dict(v)
        else:
            out[k] = v
    return out


def _safe_predicate(pred: Callable[[Viewport], Any]) -> Callable[[Viewport], bool]:
    name = getattr(pred, "__name__", repr(pred))

    def _evaluate(viewport: Viewport) -> bool:
        try:
            return bool(pred(viewport))
        except Exception as e:
            rlog.log_warn(f"Responsive predicate '{name}' failed ({e}); treating it as not matching.")
            return False

    _evaluate.__name__ = name
    return _evaluate


class OptionsProvider:
    """
    Effective chart options = defaults ← options ← every responsive override
    whose predicate currently holds (later entries win).

    One media-query list is kept per responsive entry. Whenever one of them
    flips, the whole merge is recomputed and subscribers get the new options,
    unless the result is equal to the previous one. Without responsive
    entries nothing is registered on the viewport.
    """

    def __init__(
        self,
        defaults: Options,
        options: Optional[Options] = None,
        responsive_options: Optional[Sequence[ResponsiveOption]] = None,
        *,
        environment: Optional[Viewport] = None,
    ):
        self.environment = environment or Viewport()
        self.base = merge_options(defaults, options)
        self.changed = Signal()
        self._entries: List[Tuple[Optional[MediaQueryList], Options]] = []
        self._env_subs: List[Subscription] = []

        for idx, entry in enumerate(responsive_options or []):
            predicate, partial = self._unpack(entry, idx)
            mql = self._match(predicate, idx)
            self._entries.append((mql, partial))
            if mql is not None:
                self._env_subs.append(mql.add_listener(self._on_media_change))

        self.current: Options = self._apply()

    @staticmethod
    def _unpack(entry: Any, idx: int) -> ResponsiveOption:
        if not isinstance(entry, (tuple, list)) or len(entry) != 2:
            raise ValueError(f"responsive_options[{idx}] must be a (predicate, options) pair")
        predicate, partial = entry
        if not isinstance(partial, dict):
            raise TypeError(f"responsive_options[{idx}] options must be a dict, got {type(partial).__name__}")
        return predicate, partial

    def _match(self, predicate: Any, idx: int) -> Optional[MediaQueryList]:
        if callable(predicate):
            predicate = _safe_predicate(predicate)
        try:
            return self.environment.match_media(predicate)
        except MediaQueryError as e:
            rlog.log_warn(f"responsive_options[{idx}]: {e}; entry will never match.")
            return None

    def _apply(self) -> Options:
        merged = merge_options(self.base, None)
        for mql, partial in self._entries:
            if mql is not None and mql.matches:
                merged = merge_options(merged, partial)
        return merged

    def matching(self) -> List[str]:
        return [mql.media for mql, _ in self._entries if mql is not None and mql.matches]

    def _on_media_change(self, mql: MediaQueryList) -> None:
        rlog.log_debug(f"Media query '{mql.media}' now {'matches' if mql.matches else 'does not match'}")
        updated = self._apply()
        if updated == self.current:
            return
        self.current = updated
        self.changed.emit(copy(updated))

    def subscribe(self, callback: OnChange) -> Subscription:
        return self.changed.connect(callback)

    def close(self) -> None:
        for sub in self._env_subs:
            sub.unsubscribe()
        self._env_subs.clear()


def resolve(
    base: Options,
    override: Optional[Options],
    responsive_options: Optional[Sequence[ResponsiveOption]],
    on_change: Optional[OnChange] = None,
    *,
    environment: Optional[Viewport] = None,
) -> OptionsProvider:
    """
    Build a provider and subscribe on_change to it. provider.current holds the
    effective options right away; keep the provider to close() it later.
    """
    provider = OptionsProvider(base, override, responsive_options, environment=environment)
    if on_change is not None:
        provider.subscribe(on_change)
    return provider
