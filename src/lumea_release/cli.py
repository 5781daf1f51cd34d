"""Command line interface for the Lumea release tooling."""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Optional, Sequence

from lumea_release.artifacts.collector import collect_artifacts
from lumea_release.bundling.cargo import compile_core
from lumea_release.bundling.pipeline import (
    build_api,
    build_with_packer,
    create_binary,
    default_output_path,
    pack_directory,
)
from lumea_release.constants import (
    DEFAULT_JSON_MANIFESTS,
    DEFAULT_TOML_MANIFESTS,
    DIST_DIR,
    LEGACY_PACKER,
)
from lumea_release.errors import MissingArgumentError, ReleaseError, log_error
from lumea_release.install.installer import install
from lumea_release.logging import configure_logging, get_logger
from lumea_release.typegen.declarations import wrap_declarations
from lumea_release.typegen.ops import generate_op_bindings
from lumea_release.versions.sync import (
    check_versions,
    collect_readings,
    stamp_version,
    write_version,
)

logger = get_logger("cli")


def _require(args: argparse.Namespace, *flags: str) -> None:
    for flag in flags:
        if getattr(args, flag.lstrip("-").replace("-", "_"), None) in (None, ""):
            raise MissingArgumentError(flag)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="lumea-release", description="Lumea release tooling.")
    parser.add_argument("--log-level", default="WARNING", help="Log level for stderr JSON logs.")
    sub = parser.add_subparsers(dest="command")

    build = sub.add_parser("build", help="Bundle, stage and pack with the external packer.")
    build.add_argument("--binary", type=Path, help="Launcher binary to pack into.")
    build.add_argument("--assets", type=Path, help="Static assets directory.")
    build.add_argument("--js-entry", type=Path, help="JavaScript entry file.")
    build.add_argument("--out", type=Path, help="Packed binary output path.")
    build.add_argument("--packer", default=LEGACY_PACKER, help="External packer executable.")

    pack = sub.add_parser("pack", help="Bundle <dir>/index.js with <dir>/assets into a launcher.")
    pack.add_argument("--bin", type=Path, help="Launcher binary to pack into.")
    pack.add_argument("--dir", type=Path, default=Path("."), help="App directory.")
    pack.add_argument("--out", type=Path, help="Packed binary output path.")

    create = sub.add_parser("create", help="Build a Lumea app binary from a package directory.")
    create.add_argument("dir", type=Path, help="Directory to build from.")
    create.add_argument("-o", "--out", type=Path, help="Output path for the binary.")
    create.add_argument("--launcher", type=Path, help="Launcher binary (default: dist/<platform path>).")

    check = sub.add_parser("check-versions", help="Fail when manifest and tag versions differ.")
    check.add_argument("--root", type=Path, default=Path("."), help="Repository root.")
    check.add_argument("--json", type=Path, action="append", help="JSON manifest (repeatable).")
    check.add_argument("--toml", type=Path, action="append", help="TOML manifest (repeatable).")
    check.add_argument("--tag", action="store_true", help="Also compare the latest git tag.")

    set_version = sub.add_parser("set-version", help="Write a version into every manifest.")
    set_version.add_argument("version", nargs="?")
    set_version.add_argument("--root", type=Path, default=Path("."), help="Repository root.")

    stamp = sub.add_parser("stamp-version", help="Replace the CI version placeholder in a file.")
    stamp.add_argument("version", nargs="?")
    stamp.add_argument("--file", type=Path, default=Path("package") / "install.js")

    collect = sub.add_parser("collect", help="Copy release binaries into npm sub-packages.")
    collect.add_argument("--artifacts", type=Path, default=Path("artifacts"))
    collect.add_argument("--npm", type=Path, default=Path("npm"))

    inst = sub.add_parser("install", help="Download the prebuilt binary for this platform.")
    inst.add_argument("--package-dir", type=Path, default=Path("."))
    inst.add_argument("--host", help="Release server base URL.")
    inst.add_argument("--no-types", action="store_true", help="Skip the types.d.ts download.")

    ops = sub.add_parser("gen-ops", help="Generate TypeScript bindings for core ops.")
    ops.add_argument("--source", type=Path, default=Path("core") / "src" / "main.rs")
    ops.add_argument("--out", type=Path, default=Path("api") / "main" / "funcs.ts")

    types = sub.add_parser("wrap-types", help="Merge api_<module>.d.ts files into types.d.ts.")
    types.add_argument("--dist", type=Path, default=Path(DIST_DIR))
    types.add_argument("--module", action="append", dest="modules")

    api = sub.add_parser("build-api", help="Bundle the api packages.")
    api.add_argument("--api-root", type=Path, default=Path("api"))
    api.add_argument("--module", action="append", dest="modules")

    core = sub.add_parser("compile-core", help="cargo build the core and copy it out.")
    core.add_argument("--core-dir", type=Path, default=Path("core"))
    core.add_argument("--release", action="store_true")

    return parser


async def run(args: argparse.Namespace) -> int:
    match args.command:
        case "build":
            _require(args, "--binary", "--assets", "--js-entry", "--out")
            print("Bundling...")
            await build_with_packer(args.binary, args.assets, args.js_entry, args.out, args.packer)
            print("Building complete!")

        case "pack":
            _require(args, "--bin")
            await pack_directory(args.bin, args.dir, args.out or default_output_path())
            print("Building complete!")

        case "create":
            output = await create_binary(args.dir, args.out, args.launcher)
            print(f"Built {output}")

        case "check-versions":
            readings = await collect_readings(
                args.root,
                args.json or DEFAULT_JSON_MANIFESTS,
                args.toml if args.toml is not None else DEFAULT_TOML_MANIFESTS,
                include_tag=args.tag,
            )
            version = check_versions(readings)
            print(f"✅ Versions match: {version}")

        case "set-version":
            written = write_version(
                args.version,
                [args.root / p for p in DEFAULT_JSON_MANIFESTS],
                [args.root / p for p in DEFAULT_TOML_MANIFESTS],
            )
            print(f"Version {args.version} written to {len(written)} manifests")

        case "stamp-version":
            stamp_version(args.file, args.version)
            print(f"✅ Package version set to {args.version}")

        case "collect":
            collected = await collect_artifacts(args.artifacts, args.npm)
            print(f"Collected {len(collected)} artifacts")

        case "install":
            if await install(args.package_dir, host=args.host, with_types=not args.no_types):
                print("✅ Lumea installed")
            else:
                print("✅ Lumea is already installed")

        case "gen-ops":
            found = generate_op_bindings(args.source, args.out)
            print(f"Found {len(found)} functions")

        case "wrap-types":
            target = wrap_declarations(args.dist, args.modules or ["main"])
            print(f"✅ types.d.ts created at {target}")

        case "build-api":
            await build_api(args.api_root, args.modules or ["main"])
            print("Done!")

        case "compile-core":
            await compile_core(args.core_dir, args.release)

        case _:
            raise MissingArgumentError("command", "Missing command")

    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    try:
        return asyncio.run(run(args))
    except ReleaseError as e:
        log_error(e, {"command": args.command}, logger)
        print(f"❌ {e}", file=sys.stderr)
        return e.exit_code
    except (OSError, ValueError) as e:
        # unreadable or malformed input files
        log_error(e, {"command": args.command}, logger)
        print(f"❌ {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
