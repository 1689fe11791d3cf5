from qt_base_app.models.settings_manager import SettingType

# --- Define Keys ---
FFMPEG_PATH_KEY = 'converter/ffmpeg_path'
FFPROBE_PATH_KEY = 'converter/ffprobe_path'
PROBE_TIMEOUT_MS_KEY = 'converter/probe_timeout_ms'
# Empty output dir means "next to the source file"
OUTPUT_DIR_KEY = 'converter/output_dir'
OUTPUT_FORMAT_KEY = 'converter/output_format'
AUDIO_BITRATE_KEY = 'converter/audio_bitrate_kbps'
# Last directory used by the Add Files dialog
LAST_INPUT_DIR_KEY = 'recent/input_dir'

# --- Define Default Values ---
DEFAULT_FFMPEG_PATH = "ffmpeg"
DEFAULT_FFPROBE_PATH = "ffprobe"
DEFAULT_PROBE_TIMEOUT_MS = 30000
DEFAULT_OUTPUT_DIR = ""
DEFAULT_OUTPUT_FORMAT = "mp4"
DEFAULT_AUDIO_BITRATE = 192  # kbps
DEFAULT_LAST_INPUT_DIR = ""

# Map Key Constant -> (Default Value, SettingType)
MEDIA_CONVERTER_DEFAULTS = {
    FFMPEG_PATH_KEY: (DEFAULT_FFMPEG_PATH, SettingType.STRING),
    FFPROBE_PATH_KEY: (DEFAULT_FFPROBE_PATH, SettingType.STRING),
    PROBE_TIMEOUT_MS_KEY: (DEFAULT_PROBE_TIMEOUT_MS, SettingType.INT),
    OUTPUT_DIR_KEY: (DEFAULT_OUTPUT_DIR, SettingType.STRING),
    OUTPUT_FORMAT_KEY: (DEFAULT_OUTPUT_FORMAT, SettingType.STRING),
    AUDIO_BITRATE_KEY: (DEFAULT_AUDIO_BITRATE, SettingType.INT),
    LAST_INPUT_DIR_KEY: (DEFAULT_LAST_INPUT_DIR, SettingType.STRING),
}
