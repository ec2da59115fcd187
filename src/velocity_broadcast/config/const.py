# velocity_broadcast/config/const.py
# --- Package Constants ---
package_name = "velocity-broadcast"
app_name_title = "VelocityBroadcast"
env_name = package_name.replace("-", "_").upper()

# Running plugin version. Also written as the settings schema tag.
PLUGIN_VERSION = "1.2"

SETTINGS_FILE_NAME = "config.yml"

# --- Update Check ---
SPIGOT_RESOURCE_ID = "119858"
UPDATE_CHECK_URL = (
    f"https://api.spigotmc.org/legacy/update.php?resource={SPIGOT_RESOURCE_ID}"
)
DOWNLOAD_URL = f"https://www.spigotmc.org/resources/{SPIGOT_RESOURCE_ID}"
UPDATE_CHECK_TIMEOUT = 10
# How long a fetched result is reused for session-start notices.
UPDATE_CHECK_CACHE_SECONDS = 300
UPDATE_CHECK_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/100.0.4896.127 Safari/537.36"
)

# --- Permissions ---
PERMISSION_BROADCAST = "vb.broadcast"
PERMISSION_PREFIX = "vb.prefix"
PERMISSION_ADMIN = "vb.admin"
PERMISSION_UPDATE = "vb.update"

# --- Commands ---
COMMAND_NAME = "vbroadcast"
COMMAND_ALIASES = ("vb",)
PREFIX_COMMAND_NAME = "vbroadcastprefix"
PREFIX_COMMAND_ALIASES = ("vbprefix",)
