#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Pairmer v0.1.0

Metadata splitting — turn a sample metadata table into one file per
metadata field for the downstream network model.

The input is tab-separated with a ``name`` column. Columns whose header
ends in ``.d`` (discrete), ``.c`` (continuous) or ``.ll`` (latitude/
longitude) are exported to ``metadata/<column>``:

    Sample  <column base split on "_">
    <name>  <value split on ",">

Author: Pairmer Development Team
License: MIT - See LICENSE
"""

import contextlib
import csv
import logging
import re
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from ..config.settings import PipelineConfig
from ..errors import ConfigurationError
from ..utils.checkpoints import atomic_write

logger = logging.getLogger(__name__)

METADATA_FIELD_RE = re.compile(r'\.(c|d|ll)$')
_VALUE_SPLIT_RE = re.compile(r'\s*,\s*')


def metadata_fields(fieldnames: Sequence[str]) -> List[str]:
    """Columns of the table that are exported."""
    return [f for f in fieldnames if METADATA_FIELD_RE.search(f)]


def field_header(field: str) -> List[str]:
    """
    Header row for one field file.

    Example:
        >>> field_header('lat_lon.ll')
        ['Sample', 'lat', 'lon']
    """
    base = field.split('.', 1)[0]
    return ['Sample'] + base.split('_')


class MetadataSplitter:
    """Write ``metadata/<field>`` files for the selected samples."""

    def __init__(self, config: PipelineConfig):
        self.config = config
        self.logger = logging.getLogger(__name__)

    def _clear_previous(self, meta_dir: Path):
        previous = [
            p for p in meta_dir.iterdir()
            if p.is_file() and METADATA_FIELD_RE.search(p.name)
        ]
        if previous:
            n = len(previous)
            self.logger.debug(f"Removing {n} previous metadata file{'' if n == 1 else 's'}")
            for p in previous:
                p.unlink()

    def run(self, names: Sequence[str]) -> Optional[Path]:
        """
        Split the metadata table.

        Args:
            names: Selected sample names; every one must have a row

        Returns:
            The metadata directory, or None if no metadata file is configured

        Raises:
            ConfigurationError: If the file is missing, has no ``name``
                column, or a selected sample lacks metadata
        """
        in_file = self.config.metadata
        if in_file is None:
            return None

        if not in_file.is_file() or in_file.stat().st_size == 0:
            raise ConfigurationError(f"Bad metadata file ({in_file})")

        meta_dir = self.config.metadata_dir
        if meta_dir.is_dir():
            self._clear_previous(meta_dir)
        else:
            meta_dir.mkdir(parents=True)

        self.logger.debug(f"metadata file ({in_file})")
        self.logger.debug(f"metadata_dir ({meta_dir})")

        wanted = set(names)
        seen: Dict[str, set] = {}

        with open(in_file, 'r', newline='') as f:
            reader = csv.DictReader(f, delimiter='\t')
            fieldnames = reader.fieldnames or []
            if 'name' not in fieldnames:
                raise ConfigurationError(f"Metadata file ({in_file}) has no 'name' column")

            fields = metadata_fields(fieldnames)
            self.logger.debug("metadata fields = " + ", ".join(fields))

            with contextlib.ExitStack() as stack:
                handles = {
                    field: stack.enter_context(atomic_write(meta_dir / field))
                    for field in fields
                }
                for field, fh in handles.items():
                    fh.write('\t'.join(field_header(field)) + '\n')

                for rec in reader:
                    sample_name = (rec.get('name') or '').strip()
                    if not sample_name:
                        continue
                    if wanted and sample_name not in wanted:
                        continue

                    for field, fh in handles.items():
                        seen.setdefault(sample_name, set()).add(field)
                        values = _VALUE_SPLIT_RE.split((rec.get(field) or '').strip())
                        fh.write('\t'.join([sample_name] + values) + '\n')

                errors = []
                for name in names:
                    missing = [fld for fld in fields if fld not in seen.get(name, ())]
                    if missing:
                        errors.append(f"{name} missing meta: {', '.join(missing)}")
                if errors:
                    raise ConfigurationError("Metadata errors:\n  " + "\n  ".join(errors))

        self.logger.info(f"Wrote {len(fields)} metadata file(s) to {meta_dir}")
        return meta_dir
