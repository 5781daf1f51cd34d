"""Core type definitions"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional

from lumea_release.constants import CPU_TO_NODE_ARCH, SYS_TO_NODE_PLATFORM

VersionSourceKind = Enum("VersionSourceKind", ["JSON", "TOML", "TAG"])
BundleFormat = Enum("BundleFormat", {"ESM": "esm", "CJS": "cjs"})


@dataclass(frozen=True)
class VersionReading:
    """A version string read from one source"""
    source: str
    kind: VersionSourceKind
    raw: str

    @property
    def normalized(self) -> str:
        return "v" + self.raw.strip().lstrip("v")


@dataclass(frozen=True)
class PlatformTarget:
    """Resolved OS / architecture of a Lumea install"""
    os_name: str
    platform: str
    arch: str
    launcher_path: str

    @property
    def registry_id(self) -> str:
        return f"{self.platform}-{self.arch}"


@dataclass(frozen=True)
class BuildTriple:
    """Parsed compiler target triple"""
    raw: str
    cpu: str
    sys: str
    vendor: Optional[str] = None
    abi: Optional[str] = None

    @property
    def platform(self) -> str:
        return SYS_TO_NODE_PLATFORM.get(self.sys, self.sys)

    @property
    def arch(self) -> str:
        return CPU_TO_NODE_ARCH.get(self.cpu, self.cpu)

    @property
    def platform_arch(self) -> str:
        return f"{self.platform}-{self.arch}"

    @property
    def registry_id(self) -> str:
        if self.abi:
            return f"{self.platform_arch}-{self.abi}"
        return self.platform_arch


@dataclass(frozen=True)
class BundleOptions:
    """esbuild invocation settings"""
    format: BundleFormat = BundleFormat.CJS
    target: str = "es2020"
    minify: bool = True
    sourcemap: bool = False
    externals: tuple[str, ...] = ("node:*",)
    force_node_protocol: bool = True
    loaders: dict[str, str] = field(default_factory=dict)
    working_dir: Optional[Path] = None


@dataclass(frozen=True)
class StagedBundle:
    """Staging directory ready to be packed"""
    root: Path
    script: Path
    sourcemap: Optional[Path]
    assets_dir: Path


@dataclass(frozen=True)
class CollectedArtifact:
    """A build artifact copied into an npm platform sub-package"""
    source: Path
    destination: Path
    registry_id: str
