"""File writer - writes generated artifacts and the discovery report to disk."""
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Union

from connector_generator.schema.models import ApiConfiguration, GeneratedFile

logger = logging.getLogger(__name__)

REPORT_FILE_NAME = "discovery.json"


class FileWriter:
    """Write generated files under an output directory."""

    def write(self, files: Iterable[GeneratedFile], output_path: Union[str, Path]) -> List[Path]:
        """
        Write every file, creating intermediate directories

        Existing files are overwritten. Content is written verbatim as UTF-8.

        Returns:
            Paths written, in input order
        """
        root = Path(output_path)
        written = []

        for generated in files:
            target = root / generated.relative_path / generated.file_name if generated.relative_path \
                else root / generated.file_name
            target.parent.mkdir(parents=True, exist_ok=True)

            with open(target, "w", encoding="utf-8", newline="\n") as f:
                f.write(generated.content)

            logger.debug(f"Wrote {target}")
            written.append(target)

        logger.info(f"Wrote {len(written)} files to {root}")
        return written

    def write_report(self, config: ApiConfiguration, output_path: Union[str, Path]) -> Path:
        """Export the discovered endpoints and inferred schemas as JSON."""
        target = Path(output_path) / REPORT_FILE_NAME
        target.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "metadata": {
                "created_at": datetime.now().isoformat(),
                "api_name": config.api_name,
                "base_url": config.base_url,
                "endpoints": len(config.endpoints),
                "schemas": len(config.schemas),
            },
            "endpoints": [e.to_dict() for e in config.endpoints],
            "schemas": {name: s.to_dict() for name, s in config.schemas.items()},
        }

        with open(target, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, default=str)

        return target
