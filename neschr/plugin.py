"""
Editor plugin adapter.

Tile editors hand plugins an argument bag (source stream, destination stream,
free-form parameters). ``ChrPlugin.read`` loads CHR into the editor and
``ChrPlugin.write`` puts the edited CHR back into the ROM.

Hosts disagree on where the edited CHR travels, so ``resolve_new_chr`` probes
the known parameter keys and attributes here, keeping ``neschr.rom`` free of
host conventions.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, BinaryIO

from neschr import PLUGIN_NAME, PLUGIN_NEW_CHR_ATTRS, PLUGIN_NEW_CHR_KEYS
from neschr._format.errors import MissingHandleError
from neschr._format.streams import BytesLike
from neschr.rom import extract_chr, replace_chr

logger = logging.getLogger(__name__)


@dataclass
class PluginArgs:
    """Arguments passed by the host for one read or write."""

    source: BinaryIO | None = None
    destination: BinaryIO | None = None
    parameters: Mapping[str, Any] = field(default_factory=dict)


def _coerce_chr(value: Any) -> BytesLike | BinaryIO | None:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return value
    if hasattr(value, "read"):
        return value
    for method in ("getvalue", "tobytes"):
        fn = getattr(value, method, None)
        if callable(fn):
            data = fn()
            if isinstance(data, (bytes, bytearray, memoryview)):
                return data
    return None


def resolve_new_chr(args: Any) -> BytesLike | BinaryIO:
    """Find the replacement CHR data the host attached to ``args``.

    Looks in ``args.parameters`` under each of PLUGIN_NEW_CHR_KEYS, then at
    the attributes in PLUGIN_NEW_CHR_ATTRS.
    """
    candidate = None

    parameters = getattr(args, "parameters", None)
    if isinstance(parameters, Mapping):
        for key in PLUGIN_NEW_CHR_KEYS:
            if parameters.get(key) is not None:
                candidate = parameters[key]
                logger.debug("New CHR found in parameters[%r]", key)
                break

    if candidate is None:
        for attr in PLUGIN_NEW_CHR_ATTRS:
            if getattr(args, attr, None) is not None:
                candidate = getattr(args, attr)
                logger.debug("New CHR found in args.%s", attr)
                break

    if candidate is None:
        raise MissingHandleError(
            f"Write requires the new CHR data in parameters[{PLUGIN_NEW_CHR_KEYS[0]!r}] "
            f"as bytes or a binary stream"
        )

    data = _coerce_chr(candidate)
    if data is None:
        raise MissingHandleError(
            f"Unsupported new CHR value of type {type(candidate).__name__}; "
            f"expected bytes or a binary stream"
        )
    return data


class ChrPlugin:
    """iNES CHR plugin: Read extracts CHR, Write reinserts it."""

    name = PLUGIN_NAME

    def read(self, args: PluginArgs) -> None:
        if args is None:
            raise MissingHandleError("Plugin arguments are required")
        if args.source is None:
            raise MissingHandleError("Source stream is required for read")
        if args.destination is None:
            raise MissingHandleError("Destination stream is required for read")

        layout = extract_chr(args.source, args.destination)
        logger.info("Plugin read: %d tiles", layout.tile_count)

    def write(self, args: PluginArgs) -> None:
        if args is None:
            raise MissingHandleError("Plugin arguments are required")
        if args.source is None:
            raise MissingHandleError("Source stream (original ROM) is required for write")
        if args.destination is None:
            raise MissingHandleError("Destination stream (output ROM) is required for write")

        new_chr = resolve_new_chr(args)
        layout = replace_chr(args.source, new_chr, args.destination)
        logger.info("Plugin write: %d tiles reinserted", layout.tile_count)
