"""Release tables, names and defaults."""

from pathlib import Path

# GitHub release URL structure
RELEASE_HOST = "https://github.com"
RELEASE_OWNER = "lumeajs"
RELEASE_REPO = "lumea"
RELEASES_DOWNLOAD_PATH = "releases/download"

RELEASE_HOST_ENV = "LUMEA_RELEASE_HOST"
ESBUILD_ENV = "LUMEA_ESBUILD"

ARTIFACT_NAME = "lumea"
TYPES_ASSET = "types.d.ts"
DIST_DIR = "dist"
INSTALL_MARKER = "path.txt"

# Prefix of the per-target core binaries produced by CI
BINARY_PREFIX = "core-"
SKIP_DIRS = {"node_modules"}

DEFAULT_APP_NAME = "lumea-app"
STAGING_DIR = Path(".lumea") / "tmp"
LEGACY_PACKER = "./builder.exe"

# Repository manifests kept in sync
DEFAULT_JSON_MANIFESTS = (Path("package") / "package.json", Path("api") / "package.json")
DEFAULT_TOML_MANIFESTS = (Path("core") / "Cargo.toml",)
VERSION_PLACEHOLDER = "CI_INPUT_VERSION"

# Rust target vocabulary -> npm vocabulary
SYS_TO_NODE_PLATFORM = {
    "linux": "linux",
    "freebsd": "freebsd",
    "darwin": "darwin",
    "windows": "win32",
}

CPU_TO_NODE_ARCH = {
    "x86_64": "x64",
    "aarch64": "arm64",
    "i686": "ia32",
    "armv7": "arm",
    "riscv64gc": "riscv64",
    "powerpc64le": "ppc64",
}

# platform.machine() -> npm arch
MACHINE_TO_NODE_ARCH = {
    "x86_64": "x64",
    "amd64": "x64",
    "x64": "x64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "i386": "ia32",
    "i686": "ia32",
    "x86": "ia32",
    "armv7l": "arm",
    "armv7": "arm",
}

# Prebuilt release assets, keyed by "{platform}-{arch}"
PLATFORM_ARCH_TO_NAME = {
    "win32-x64": "x86_64-pc-windows-msvc",
}

# Node built-ins that must be imported through the node: protocol
NODE_BUILTINS = frozenset({
    "assert",
    "buffer",
    "child_process",
    "cluster",
    "console",
    "constants",
    "crypto",
    "dgram",
    "dns",
    "domain",
    "events",
    "fs",
    "http",
    "https",
    "module",
    "net",
    "os",
    "path",
    "process",
    "punycode",
    "querystring",
    "readline",
    "repl",
    "stream",
    "string_decoder",
    "timers",
    "tls",
    "tty",
    "url",
    "util",
    "v8",
    "vm",
    "zlib",
    "worker_threads",
    "inspector",
})

LEGACY_LOADERS = {".ts": "ts", ".js": "js", ".json": "json", ".wasm": "base64"}
