"""Internal constants shared across the library."""

#: Preference group under which toggle states are stored.
DEFAULT_NAMESPACE = "toggleToolbox"
#: Key of the toggle state record inside the namespace.
STATE_KEY = "toolbox_states"
#: Default state file name (inside the user config directory).
STATE_FILENAME = "toolbox_states.json"

#: The host application's own "toolbox". Disabling it would make the host unusable.
DEFAULT_HOST_MODULE = "matlab"

#: Manifest file read from every module directory by the directory registry.
MANIFEST_FILENAME = "info.json"

# ------------------------------------------------------------------
# Request keywords (case-insensitive)
# ------------------------------------------------------------------

ALL_KEYWORD = "all"
NAMES_KEYWORD = "names"
QUERY_KEYWORD = "query"
ENABLE_KEYWORDS: frozenset[str] = frozenset({"on", "enable"})
DISABLE_KEYWORDS: frozenset[str] = frozenset({"off", "disable"})
