"""
FFmpeg/ffprobe helpers for probing and converting media.
Assumes the executables are reachable through the configured paths (PATH by default).
"""
import os
import re
import subprocess
from typing import Optional, Tuple, List

from .conversion_parameters import ConversionParameters

# Keys read from ConversionParameters.options
OPTION_AUDIO_CODEC = "audio_codec"
OPTION_AUDIO_BITRATE = "audio_bitrate_kbps"
OPTION_VIDEO_CODEC = "video_codec"
OPTION_VIDEO_BITRATE = "video_bitrate_kbps"
OPTION_DISABLE_VIDEO = "disable_video"
OPTION_DISABLE_AUDIO = "disable_audio"
OPTION_EXTRA_ARGS = "extra_args"


def creation_flags() -> int:
    """Hide the console window for child processes on Windows."""
    return subprocess.CREATE_NO_WINDOW if os.name == 'nt' else 0


def build_probe_command(input_path: str, ffprobe_path: str = "ffprobe") -> List[str]:
    """
    Build the ffprobe command that prints the container duration in seconds.

    Args:
        input_path: Path to the media file
        ffprobe_path: Path to ffprobe executable

    Returns:
        List[str]: ffprobe command arguments
    """
    return [
        ffprobe_path, "-v", "error",
        "-show_entries", "format=duration",
        "-of", "default=noprint_wrappers=1:nokey=1",
        str(input_path)
    ]


def parse_duration(text: Optional[str]) -> Optional[float]:
    """
    Parse the duration printed by ffprobe.

    Args:
        text: Raw stdout of the probe command

    Returns:
        Optional[float]: Duration in seconds, or None if missing, 'N/A' or negative
    """
    if not text:
        return None
    value = text.strip().splitlines()[0].strip() if text.strip() else ""
    if not value or value.lower() == 'n/a':
        return None
    try:
        duration = float(value)
    except ValueError:
        return None
    if duration < 0:
        return None
    return duration


def split_duration(total_seconds: float) -> Tuple[int, int, float]:
    """Split seconds into (hours, minutes, seconds)."""
    hours = int(total_seconds // 3600)
    minutes = int((total_seconds % 3600) // 60)
    seconds = total_seconds - hours * 3600 - minutes * 60
    return hours, minutes, seconds


def build_conversion_command(params: ConversionParameters, ffmpeg_path: str = "ffmpeg") -> List[str]:
    """
    Build the FFmpeg command for one conversion.

    Recognised options: audio_codec, audio_bitrate_kbps, video_codec,
    video_bitrate_kbps, disable_video, disable_audio and extra_args (a list
    of raw arguments placed before the output path). Progress is written to
    stdout in key=value form.

    Args:
        params: Conversion parameters of the task
        ffmpeg_path: Path to FFmpeg executable

    Returns:
        List[str]: FFmpeg command arguments
    """
    cmd = [
        ffmpeg_path,
        "-i", params.source,
        "-y",
        "-loglevel", "error",
        "-nostats",
        "-progress", "pipe:1",
    ]

    if params.option(OPTION_DISABLE_VIDEO):
        cmd.append("-vn")
    else:
        video_codec = params.option(OPTION_VIDEO_CODEC)
        if video_codec:
            cmd.extend(["-c:v", str(video_codec)])
        video_bitrate = params.option(OPTION_VIDEO_BITRATE)
        if video_bitrate:
            cmd.extend(["-b:v", f"{int(video_bitrate)}k"])

    if params.option(OPTION_DISABLE_AUDIO):
        cmd.append("-an")
    else:
        audio_codec = params.option(OPTION_AUDIO_CODEC)
        if audio_codec:
            cmd.extend(["-c:a", str(audio_codec)])
        audio_bitrate = params.option(OPTION_AUDIO_BITRATE)
        if audio_bitrate:
            cmd.extend(["-b:a", f"{int(audio_bitrate)}k"])

    cmd.extend(str(arg) for arg in params.option(OPTION_EXTRA_ARGS, ()) or ())
    cmd.append(params.destination)
    return cmd


def parse_progress_line(line: str, total_duration_ms: Optional[float]) -> Optional[int]:
    """
    Parse a line of FFmpeg's -progress output into a percentage.

    FFmpeg reports out_time_ms in microseconds despite the name.

    Args:
        line: Line of FFmpeg stdout, e.g. 'out_time_ms=12345678'
        total_duration_ms: Total media duration in milliseconds

    Returns:
        Optional[int]: Progress between 0 and 100, or None if the line carries no position
    """
    if not total_duration_ms or total_duration_ms <= 0:
        return None
    line = line.strip()
    if line == "progress=end":
        return 100
    match = re.match(r'out_time_(?:ms|us)=(-?\d+)', line)
    if not match:
        return None
    position_ms = int(match.group(1)) / 1000.0
    percent = int(position_ms * 100 / total_duration_ms)
    return max(0, min(100, percent))


def parse_ffmpeg_error(stderr: str, return_code: int) -> str:
    """
    Parse FFmpeg error output to provide meaningful error messages.

    Args:
        stderr: FFmpeg stderr output
        return_code: Process return code

    Returns:
        str: Human-readable error message
    """
    error_patterns = [
        (r"No such file or directory", "Input file not found or inaccessible"),
        (r"Permission denied", "Permission denied - check file/directory permissions"),
        (r"Invalid data found", "Invalid or corrupted media file"),
        (r"Decoder .* not found", "Required decoder not available"),
        (r"Encoder .* not found", "Required encoder not available"),
        (r"Unknown encoder", "Encoder not supported"),
        (r"No space left on device", "Insufficient disk space"),
    ]

    for pattern, message in error_patterns:
        if re.search(pattern, stderr or "", re.IGNORECASE):
            return f"{message} (FFmpeg error code: {return_code})"

    if stderr:
        for line in reversed(stderr.strip().split('\n')):
            if line.strip():
                return f"FFmpeg error: {line.strip()} (code: {return_code})"

    return f"FFmpeg exited with code {return_code}"


def check_ffmpeg_tools(ffmpeg_path: str = "ffmpeg", ffprobe_path: str = "ffprobe") -> dict:
    """Checks for ffmpeg and ffprobe executables and returns their status."""
    results = {"ffmpeg": False, "ffprobe": False, "ffmpeg_path": ffmpeg_path, "ffprobe_path": ffprobe_path}
    for key, path in (("ffmpeg", ffmpeg_path), ("ffprobe", ffprobe_path)):
        try:
            subprocess.run([path, "-version"], capture_output=True, text=True, check=True,
                           timeout=10, creationflags=creation_flags())
            results[key] = True
        except (subprocess.CalledProcessError, subprocess.TimeoutExpired, OSError):
            results[key] = False
    return results
