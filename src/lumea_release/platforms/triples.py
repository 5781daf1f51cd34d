"""Compiler target triple parsing."""

from lumea_release.types import BuildTriple

EABI_SUFFIX = "eabi"


def parse_build_triple(triple: str) -> BuildTriple:
    """Parse a ``cpu-vendor-sys[-abi]`` or ``cpu-sys`` target string.

    A trailing ``eabi`` (``armv7-unknown-linux-musleabi``) is split off and
    always becomes the abi, whatever the number of remaining segments.
    """
    if not triple:
        raise ValueError("Build triple cannot be empty")

    forced_abi = None
    body = triple
    if triple.endswith(EABI_SUFFIX) and len(triple) > len(EABI_SUFFIX):
        body = triple[: -len(EABI_SUFFIX)].rstrip("-")
        forced_abi = EABI_SUFFIX

    segments = body.split("-")
    if any(not segment for segment in segments):
        raise ValueError(f"Malformed build triple: {triple}")

    match segments:
        case [cpu, sys]:
            # aarch64-fuchsia
            parsed = BuildTriple(raw=triple, cpu=cpu, sys=sys)
        case [cpu, vendor, sys]:
            # x86_64-apple-darwin
            parsed = BuildTriple(raw=triple, cpu=cpu, vendor=vendor, sys=sys)
        case [cpu, vendor, sys, abi]:
            # aarch64-unknown-linux-musl
            parsed = BuildTriple(raw=triple, cpu=cpu, vendor=vendor, sys=sys, abi=abi)
        case _:
            raise ValueError(f"Unsupported build triple shape: {triple}")

    if forced_abi:
        return BuildTriple(
            raw=parsed.raw, cpu=parsed.cpu, vendor=parsed.vendor, sys=parsed.sys, abi=forced_abi
        )
    return parsed


def registry_id_for(triple: str) -> str:
    """Return the npm ``{platform}-{arch}[-{abi}]`` id of a target triple."""
    return parse_build_triple(triple).registry_id
