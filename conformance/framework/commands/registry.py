"""
Command Kind Registry

The single table of every command kind the harness knows about. Trace decoding,
interactive payload checks and the mock response synthesizer all consult these
tables, so adding a kind means adding one registration here.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple

from .descriptor import CommandFamily
from .shapes import (
    Shape, ANY, BOOLEAN, NUMBER, STRING, OBJECT, NOTHING,
    SONG, SONGS, PLAYLIST, PLAYER_STATE, PREFERENCE_DATA, PREFERENCE_QUERY, PACKAGE,
    array_of, optional, record, tuple_of,
)


class QueryCategory(Enum):
    """How a host query is matched against recorded mock responses."""
    PARAMETERIZED = "parameterized"
    PARAMETERLESS = "parameterless"
    SELECTOR = "selector"


# Selector(package_name, query_data) -> fully qualified lookup key
SelectorKey = Callable[[str, Any], str]


@dataclass(frozen=True)
class QueryKind:
    """Registry entry for a query the host may send to the harness."""
    kind: str
    category: QueryCategory
    request_shape: Shape
    response_shape: Shape
    default: Callable[[], Any]
    selector_key: Optional[SelectorKey] = None


@dataclass(frozen=True)
class CommandKind:
    """Registry entry for a command or event the harness sends to the host."""
    kind: str
    family: CommandFamily
    payload_shape: Shape


# Global registries
QUERY_KINDS: Dict[str, QueryKind] = {}
EXTENSION_COMMANDS: Dict[str, CommandKind] = {}
EXTENSION_EVENTS: Dict[str, CommandKind] = {}

# Outbound events are delivered to the host wrapped in this command
EXTRA_EVENT_COMMAND = "extraExtensionEvent"


def register_query_kind(
    kind: str,
    category: QueryCategory,
    response_shape: Shape,
    default: Callable[[], Any],
    request_shape: Shape = ANY,
    selector_key: Optional[SelectorKey] = None,
) -> QueryKind:
    """Register a host query kind. Selector kinds must provide `selector_key`."""
    if (category is QueryCategory.SELECTOR) != (selector_key is not None):
        raise ValueError(f"Query kind {kind}: selector_key is required for selector kinds only")
    entry = QueryKind(
        kind=kind,
        category=category,
        request_shape=request_shape,
        response_shape=response_shape,
        default=default,
        selector_key=selector_key,
    )
    QUERY_KINDS[kind] = entry
    return entry


def register_extension_command(kind: str, payload_shape: Shape) -> CommandKind:
    entry = CommandKind(kind, CommandFamily.EXTENSION_COMMAND, payload_shape)
    EXTENSION_COMMANDS[kind] = entry
    return entry


def register_extension_event(kind: str, payload_shape: Shape) -> CommandKind:
    entry = CommandKind(kind, CommandFamily.EXTENSION_EVENT, payload_shape)
    EXTENSION_EVENTS[kind] = entry
    return entry


def lookup_outbound(kind: str) -> Optional[CommandKind]:
    """Find a command or event kind that a trace step may send."""
    return EXTENSION_COMMANDS.get(kind) or EXTENSION_EVENTS.get(kind)


def preference_key(package_name: str, query_data: Any) -> str:
    """Namespace a raw preference key with the extension's package name."""
    raw_key = query_data.get("key", "") if isinstance(query_data, dict) else ""
    return f"{package_name}.{raw_key}"


def empty_preference() -> Dict[str, Any]:
    return {"key": "", "value": None, "defaultValue": None}


# =============================================================================
# Host queries
# =============================================================================

_PARAMETERIZED: Tuple[Tuple[str, Shape, Shape, Callable[[], Any]], ...] = (
    # kind, request shape, response shape, default
    ("getSong", ANY, SONGS, list),
    ("getEntity", ANY, ANY, lambda: None),
    ("setPreference", PREFERENCE_DATA, BOOLEAN, bool),
    ("setSecure", PREFERENCE_DATA, BOOLEAN, bool),
    ("addSongs", SONGS, SONGS, list),
    ("removeSong", SONG, BOOLEAN, bool),
    ("updateSong", SONG, OBJECT, dict),
    ("addPlaylist", PLAYLIST, STRING, str),
    ("addToPlaylist", record(playlistID=STRING, songs=SONGS), BOOLEAN, bool),
    ("registerOAuth", STRING, BOOLEAN, bool),
    ("openExternalUrl", STRING, BOOLEAN, bool),
    ("updateAccounts", optional(STRING), BOOLEAN, bool),
    ("registerUserPreference", ANY, BOOLEAN, bool),
    ("unregisterUserPreference", ANY, BOOLEAN, bool),
)

_PARAMETERLESS: Tuple[Tuple[str, Shape, Callable[[], Any]], ...] = (
    # kind, response shape, default
    ("getCurrentSong", optional(SONG), lambda: None),
    ("getPlayerState", PLAYER_STATE, lambda: "STOPPED"),
    ("getVolume", NUMBER, float),
    ("getTime", NUMBER, float),
    ("getQueue", ANY, lambda: None),
    ("extensionsUpdated", BOOLEAN, bool),
    ("getAppVersion", STRING, str),
)

for _kind, _request, _response, _default in _PARAMETERIZED:
    register_query_kind(_kind, QueryCategory.PARAMETERIZED, _response, _default, request_shape=_request)

for _kind, _response, _default in _PARAMETERLESS:
    register_query_kind(_kind, QueryCategory.PARAMETERLESS, _response, _default, request_shape=NOTHING)

for _kind in ("getPreference", "getSecure"):
    register_query_kind(
        _kind,
        QueryCategory.SELECTOR,
        PREFERENCE_DATA,
        empty_preference,
        request_shape=PREFERENCE_QUERY,
        selector_key=preference_key,
    )


# =============================================================================
# Extension commands
# =============================================================================

register_extension_command("getProviderScopes", PACKAGE)
register_extension_command("getAccounts", PACKAGE)
register_extension_command(
    "performAccountLogin",
    record(packageName=STRING, accountId=STRING, loginStatus=BOOLEAN),
)
register_extension_command(
    "getExtensionContextMenu",
    record(packageName=STRING, contextMenuType=STRING),
)
register_extension_command(
    "onClickedContextMenu",
    record(packageName=STRING, id=STRING, arg=ANY),
)
register_extension_command(
    EXTRA_EVENT_COMMAND,
    record(packageName=STRING, data=record(type=STRING, data=ANY)),
)


# =============================================================================
# Extension events
# =============================================================================

register_extension_event("requestedPlaylists", tuple_of(BOOLEAN))
register_extension_event("requestedPlaylistSongs", tuple_of(STRING, BOOLEAN, optional(STRING)))
register_extension_event("oauthCallback", tuple_of(STRING))
register_extension_event("songQueueChanged", tuple_of(ANY))
register_extension_event("seeked", tuple_of(NUMBER))
register_extension_event("volumeChanged", tuple_of(NUMBER))
register_extension_event("playerStateChanged", tuple_of(PLAYER_STATE))
register_extension_event("songChanged", tuple_of(optional(SONG)))
register_extension_event("preferenceChanged", tuple_of(record(key=STRING, value=ANY)))
register_extension_event("playbackDetailsRequested", tuple_of(SONG))
register_extension_event("customRequest", tuple_of(STRING))
register_extension_event("requestedSongFromURL", tuple_of(STRING, BOOLEAN))
register_extension_event("requestedPlaylistFromURL", tuple_of(STRING, BOOLEAN))
register_extension_event("requestedSearchResult", tuple_of(STRING))
register_extension_event("requestedRecommendations", NOTHING)
register_extension_event("requestedLyrics", tuple_of(SONG))
register_extension_event("requestedArtistSongs", tuple_of(OBJECT, optional(STRING)))
register_extension_event("requestedAlbumSongs", tuple_of(OBJECT, optional(STRING)))
register_extension_event("songAdded", tuple_of(SONGS))
register_extension_event("songRemoved", tuple_of(SONGS))
register_extension_event("playlistAdded", tuple_of(array_of(OBJECT)))
register_extension_event("playlistRemoved", tuple_of(array_of(OBJECT)))
register_extension_event("requestedSongFromId", tuple_of(STRING))
register_extension_event("getRemoteURL", tuple_of(SONG))
