# ringchart/environment.py
from __future__ import annotations
import re
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Tuple, Union

# Display environment the charts live in: a viewport with a size, a media type,
# media-query lists and a resize signal. Listeners are called synchronously and
# in registration order.

_EM_PX = 16.0
_MEDIA_TYPES = {"all", "screen", "print"}
_SIZE_FEATURES = {"width", "min-width", "max-width", "height", "min-height", "max-height"}

_feature_pat = re.compile(r"^\(\s*([a-z-]+)\s*(?::\s*([^)]*?)\s*)?\)$")
_length_pat = re.compile(r"^(-?\d+(?:\.\d+)?)\s*(px|em|rem)?$")


class MediaQueryError(ValueError):
    pass


class Subscription:
    """Handle for one registered listener; unsubscribe() is idempotent."""

    def __init__(self, cancel: Callable[[], None]):
        self._cancel = cancel
        self.active = True

    def unsubscribe(self) -> None:
        if not self.active:
            return
        self.active = False
        self._cancel()


class Signal:
    def __init__(self):
        self._listeners: List[Callable[..., Any]] = []

    def connect(self, callback: Callable[..., Any]) -> Subscription:
        self._listeners.append(callback)

        def _cancel():
            if callback in self._listeners:
                self._listeners.remove(callback)

        return Subscription(_cancel)

    def emit(self, *args: Any) -> None:
        # copy: listeners may unsubscribe while being notified
        for cb in list(self._listeners):
            cb(*args)

    def __len__(self) -> int:
        return len(self._listeners)


@dataclass(frozen=True)
class _Condition:
    negate: bool
    media_type: str
    features: Tuple[Tuple[str, Any], ...]


def _parse_length(raw: str, query: str) -> float:
    m = _length_pat.match(raw.strip().lower())
    if not m:
        raise MediaQueryError(f"Unsupported length '{raw}' in media query '{query}'")
    value = float(m.group(1))
    if m.group(2) in ("em", "rem"):
        value *= _EM_PX
    return value


def _parse_feature(token: str, query: str) -> Tuple[str, Any]:
    m = _feature_pat.match(token)
    if not m:
        raise MediaQueryError(f"Malformed media feature '{token}' in '{query}'")
    name, value = m.group(1), m.group(2)
    if name in _SIZE_FEATURES:
        if not value:
            raise MediaQueryError(f"Media feature '{name}' needs a value in '{query}'")
        return name, _parse_length(value, query)
    if name == "orientation":
        v = (value or "").strip().lower()
        if v not in {"portrait", "landscape"}:
            raise MediaQueryError(f"orientation must be portrait or landscape in '{query}'")
        return name, v
    raise MediaQueryError(f"Unsupported media feature '{name}' in '{query}'")


def parse_media_query(query: str) -> List[_Condition]:
    """
    Parse a media query list into OR-ed conditions.
    Accepted: '[only|not] <type> [and (<feature>)]*' or '[not] (<feature>) [and (<feature>)]*'.
    """
    if not isinstance(query, str) or not query.strip():
        raise MediaQueryError("Media query must be a non-empty string")

    out: List[_Condition] = []
    for part in query.split(","):
        text = part.strip().lower()
        if not text:
            raise MediaQueryError(f"Empty alternative in media query '{query}'")
        tokens = [t.strip() for t in re.split(r"\s+and\s+", text)]

        negate = False
        media_type = "all"
        head = tokens[0]
        if re.match(r"not\s*\(", head):
            # not before a bare feature list negates the whole alternative
            negate = True
            tokens[0] = head[3:].strip()
        elif not head.startswith("("):
            words = head.split()
            if words and words[0] in ("only", "not"):
                negate = words[0] == "not"
                words = words[1:]
            if len(words) != 1 or words[0] not in _MEDIA_TYPES:
                raise MediaQueryError(f"Unknown media type in '{query}'")
            media_type = words[0]
            tokens = tokens[1:]

        features = tuple(_parse_feature(t, query) for t in tokens)
        out.append(_Condition(negate=negate, media_type=media_type, features=features))
    return out


def _feature_holds(name: str, value: Any, viewport: "Viewport") -> bool:
    if name == "orientation":
        actual = "portrait" if viewport.height >= viewport.width else "landscape"
        return actual == value
    dim = viewport.width if name.endswith("width") else viewport.height
    if name.startswith("min-"):
        return dim >= value
    if name.startswith("max-"):
        return dim <= value
    return dim == value


def _condition_holds(cond: _Condition, viewport: "Viewport") -> bool:
    type_ok = cond.media_type == "all" or cond.media_type == viewport.media_type
    result = type_ok and all(_feature_holds(n, v, viewport) for n, v in cond.features)
    return not result if cond.negate else result


Predicate = Union[str, Callable[["Viewport"], bool]]


class MediaQueryList:
    """
    Match state of one predicate against a viewport. The predicate is a media
    query string or a callable taking the viewport. Listeners fire only when
    the match state flips.
    """

    def __init__(self, viewport: "Viewport", predicate: Predicate):
        self.viewport = viewport
        if callable(predicate):
            self.media = getattr(predicate, "__name__", repr(predicate))
            self._evaluate = predicate
        else:
            conditions = parse_media_query(predicate)
            self.media = predicate
            self._evaluate = lambda vp: any(_condition_holds(c, vp) for c in conditions)
        self.matches: bool = bool(self._evaluate(viewport))
        self.changed = Signal()
        self._watch: Optional[Subscription] = None

    def add_listener(self, callback: Callable[["MediaQueryList"], Any]) -> Subscription:
        if self._watch is None:
            self._watch = self.viewport._watch(self)
        sub = self.changed.connect(callback)

        def _cancel():
            sub.unsubscribe()
            if not len(self.changed) and self._watch is not None:
                self._watch.unsubscribe()
                self._watch = None

        return Subscription(_cancel)

    def refresh(self) -> bool:
        """Re-evaluate; returns True if the match state changed."""
        now = bool(self._evaluate(self.viewport))
        if now == self.matches:
            return False
        self.matches = now
        return True


class Viewport:
    def __init__(self, width: float = 1024, height: float = 768, media_type: str = "screen"):
        if media_type not in _MEDIA_TYPES - {"all"}:
            raise ValueError(f"media_type must be 'screen' or 'print', got {media_type!r}")
        self.width = float(width)
        self.height = float(height)
        self.media_type = media_type
        self._resized = Signal()
        self._watched: List[MediaQueryList] = []

    def match_media(self, predicate: Predicate) -> MediaQueryList:
        return MediaQueryList(self, predicate)

    def on_resize(self, callback: Callable[["Viewport"], Any]) -> Subscription:
        return self._resized.connect(callback)

    def _watch(self, mql: MediaQueryList) -> Subscription:
        self._watched.append(mql)

        def _cancel():
            if mql in self._watched:
                self._watched.remove(mql)

        return Subscription(_cancel)

    def resize(self, width: float, height: float) -> None:
        """
        Change the viewport size. Media-query lists whose state flipped are
        notified first, then every resize listener, even if nothing matched
        differently.
        """
        self.width = float(width)
        self.height = float(height)
        flipped = [m for m in list(self._watched) if m.refresh()]
        for mql in flipped:
            mql.changed.emit(mql)
        self._resized.emit(self)

    def __repr__(self) -> str:
        return f"Viewport({self.width:g}x{self.height:g}, {self.media_type})"
