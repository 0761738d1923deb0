"""Rows of an airdrop CSV file: claimant address and UI amounts."""

from __future__ import annotations

import csv
import os
from dataclasses import dataclass, fields

from merkle_airdrop.errors import MerkleTreeError


@dataclass(frozen=True)
class CsvEntry:
    """One CSV row. Amounts are UI amounts, kept as the text found in the file."""

    pubkey: str
    amount: str
    locked_amount: str

    @classmethod
    def read_file(cls, path: str | os.PathLike[str]) -> list[CsvEntry]:
        """Read every entry from a CSV file with a header row.

        Columns are matched by header name; unknown columns are ignored.
        """
        try:
            with open(path, newline="", encoding="utf-8") as handle:
                return list(cls._parse(csv.reader(handle)))
        except OSError as exc:
            raise MerkleTreeError(f"io Error: {exc}") from exc

    @classmethod
    def _parse(cls, reader):
        header = next(reader, None)
        if header is None:
            return
        names = [f.name for f in fields(cls)]
        missing = [name for name in names if name not in header]
        if missing:
            raise ValueError(f"CSV header is missing column(s): {', '.join(missing)}")
        positions = {name: header.index(name) for name in names}
        for record in reader:
            if not record:
                continue
            if len(record) != len(header):
                raise ValueError(
                    f"line {reader.line_num}: found record with {len(record)} fields, "
                    f"but the header has {len(header)} fields"
                )
            yield cls(**{name: record[pos] for name, pos in positions.items()})