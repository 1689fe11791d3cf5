"""
Turns user-selected or dropped paths into conversion parameter sets.
"""
import os
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Optional

from PyQt6.QtCore import QUrl

from qt_base_app.models.logger import Logger

from .conversion_parameters import ConversionParameters


def paths_from_urls(urls: Iterable[QUrl]) -> List[str]:
    """Keep the local files of a list of dropped URLs."""
    paths = []
    for url in urls:
        if url.isLocalFile():
            paths.append(url.toLocalFile())
        else:
            Logger.instance().debug(caller="task_intake", msg=f"Skipping non-local URL: {url.toString()}")
    return paths


def build_conversion_parameters(paths: Iterable[str], output_format: str,
                                output_dir: Optional[str] = None,
                                options: Optional[Mapping[str, Any]] = None) -> List[ConversionParameters]:
    """
    Create one ConversionParameters per input file.

    The destination is <output_dir>/<stem>.<output_format>; without an output
    directory the source's own directory is used.

    Args:
        paths: Candidate source paths
        output_format: Target extension, with or without the leading dot
        output_dir: Directory for converted files, or None for the source directory
        options: Encoder options shared by all resulting parameter sets

    Returns:
        List[ConversionParameters]: Parameter sets in input order. Directories,
        missing files and sources that would overwrite themselves are skipped.
    """
    extension = output_format.lstrip('.').lower()
    results = []
    for path_str in paths:
        input_path = Path(path_str)
        if not input_path.is_file():
            Logger.instance().debug(caller="task_intake", msg=f"Skipping, not a file: {path_str}")
            continue

        target_dir = Path(output_dir) if output_dir else input_path.parent
        output_path = target_dir / f"{input_path.stem}.{extension}"
        if os.path.abspath(output_path) == os.path.abspath(input_path):
            Logger.instance().warning(caller="task_intake", msg=f"Skipping {input_path.name}: output would overwrite the source")
            continue

        results.append(ConversionParameters(str(input_path), str(output_path), dict(options or {})))
    return results
