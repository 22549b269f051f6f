import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Tuple

from shared_libs.config_models.common import CatalogRecord

logger = logging.getLogger(__name__)


def render_upload_command(config: CatalogRecord, command: str = "upload-config", force: bool = True) -> str:
    """Paste-ready serial console line. The JSON is passed unquoted; the device console does not strip quotes."""
    payload = json.dumps(config.to_document(), separators=(",", ":"), ensure_ascii=False)
    line = f"{command} {payload}"
    return f"{line} --force" if force else line


def output_stem(now: Optional[datetime] = None) -> str:
    now = now or datetime.now(tz=timezone.utc)
    # Filesystem-safe ISO timestamp with milliseconds
    iso = now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
    return "config-" + iso.replace(":", "-").replace(".", "-")


def write_final_config(
    config: CatalogRecord,
    output_dir: Path,
    *,
    command: str = "upload-config",
    force: bool = True,
    now: Optional[datetime] = None,
) -> Tuple[Path, Path]:
    """Write the validated record as JSON plus the companion upload command text. Returns both paths."""
    # Both payloads are rendered before anything touches the filesystem
    document = json.dumps(config.to_document(), indent=2, ensure_ascii=False) + "\n"
    upload_line = render_upload_command(config, command=command, force=force)

    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    stem = output_stem(now)
    json_path = output_dir / f"{stem}.json"
    text_path = output_dir / f"{stem}.txt"

    with open(json_path, "w", encoding="utf-8") as f:
        f.write(document)
    with open(text_path, "w", encoding="utf-8") as f:
        f.write(upload_line)

    logger.info(f"Saved configuration to {json_path} and {text_path}")
    return json_path, text_path
