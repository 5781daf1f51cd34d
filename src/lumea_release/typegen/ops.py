"""Generate TypeScript bindings for the ops exported by the Rust core."""

import re
from dataclasses import dataclass
from pathlib import Path

from lumea_release.logging import get_logger

logger = get_logger(__name__)

PREAMBLE = """declare const Deno: {
    core: {
        ops: Record<string, (...args: any[]) => any>;
    };
};

"""

TYPE_MAP = {
    "u32": "number",
    "i32": "number",
    "i64": "number",
    "f32": "number",
    "bool": "boolean",
    "String": "string",
    "&str": "string",
    "()": "void",
}

OP_RE = re.compile(r"#\[op[^\]]*]\s*fn\s+(\w+)\s*\(([^)]*)\)\s*(?:->\s*([^{]+?))?\s*{")


@dataclass(frozen=True)
class OpArg:
    name: str
    ts_type: str


@dataclass(frozen=True)
class OpSignature:
    name: str
    args: list[OpArg]
    return_type: str

    def render(self) -> str:
        params = ", ".join(f"{a.name}: {a.ts_type}" for a in self.args)
        call_args = ", ".join(a.name for a in self.args)
        return (
            f"export function {self.name}({params}): {self.return_type} {{\n"
            f"  return Deno.core.ops.{self.name}!({call_args});\n"
            f"}}\n"
        )


def rust_to_ts_type(rust_type: str) -> str:
    rust_type = rust_type.strip()
    if rust_type.startswith("Result<"):
        # Result<T, E> -> T
        inner = rust_type[len("Result<"):].split(",")[0]
        return rust_to_ts_type(inner.rstrip(">"))
    return TYPE_MAP.get(rust_type, "any")


def parse_ops(rust_code: str) -> list[OpSignature]:
    ops = []
    for name, args_str, return_type in OP_RE.findall(rust_code):
        args = []
        if args_str.strip():
            for arg in args_str.split(","):
                arg_name, _, arg_type = arg.strip().partition(":")
                args.append(OpArg(arg_name.strip(), rust_to_ts_type(arg_type)))
        ops.append(OpSignature(name, args, rust_to_ts_type(return_type or "()")))
    return ops


def generate_op_bindings(rust_source: Path, output: Path) -> list[OpSignature]:
    """Write one typed wrapper per ``#[op]`` function of ``rust_source``."""
    ops = parse_ops(Path(rust_source).read_text(encoding="utf-8"))
    logger.info({"event": "ops_found", "count": len(ops), "source": str(rust_source)})

    Path(output).write_text(PREAMBLE + "".join(op.render() for op in ops), encoding="utf-8")
    return ops
