from typing import Dict, List

from .parser import Record


def rename_fields(records: List[Record], renames: Dict[str, str]) -> List[Record]:
    """Return copies of ``records`` with keys renamed per ``renames``.

    Renamed keys keep the position of the key they replace.
    """
    renamed: List[Record] = []
    for record in records:
        renamed.append({renames.get(key, key): value for key, value in record.items()})
    return renamed


def apply_aliases(records: List[Record], aliases: Dict[str, str]) -> List[Record]:
    """Return copies of ``records`` with ``new_key`` copied from ``source_key``."""
    aliased: List[Record] = []
    for record in records:
        copy = dict(record)
        for new_key, source_key in aliases.items():
            if source_key in record:
                copy[new_key] = record[source_key]
        aliased.append(copy)
    return aliased
