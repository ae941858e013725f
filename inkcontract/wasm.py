"""Minimal WebAssembly binary reader used for contract analysis."""

from __future__ import annotations

import enum
import struct
from dataclasses import dataclass, field
from typing import Optional, Union


class WasmError(ValueError):
    """Raised when a WebAssembly binary cannot be read."""


class ValType(enum.Enum):
    """WebAssembly value types."""

    I32 = 0x7F
    I64 = 0x7E
    F32 = 0x7D
    F64 = 0x7C
    V128 = 0x7B
    FUNCREF = 0x70
    EXTERNREF = 0x6F


_VALTYPE_BYTES = frozenset(v.value for v in ValType)


@dataclass(frozen=True)
class FuncType:
    """A function signature."""

    params: tuple[ValType, ...] = ()
    results: tuple[ValType, ...] = ()

    def __init__(self, params=(), results=()):
        object.__setattr__(self, "params", tuple(params))
        object.__setattr__(self, "results", tuple(results))


@dataclass(frozen=True)
class Import:
    """An entry of the import section.

    ``kind`` is one of ``func``, ``table``, ``memory``, ``global`` or ``tag``;
    ``type_index`` is set for function and tag imports.
    """

    module: str
    name: str
    kind: str
    type_index: Optional[int] = None


@dataclass(frozen=True)
class Operator:
    """A single decoded instruction with its immediates."""

    name: str
    args: tuple = ()


class _Reader:
    def __init__(self, data: bytes) -> None:
        self._data = bytes(data)
        self.pos = 0

    def at_end(self) -> bool:
        return self.pos >= len(self._data)

    def remaining(self) -> bytes:
        rest = self._data[self.pos:]
        self.pos = len(self._data)
        return rest

    def peek(self) -> int:
        if self.at_end():
            raise WasmError(f"unexpected end of input at offset {self.pos}")
        return self._data[self.pos]

    def byte(self) -> int:
        value = self.peek()
        self.pos += 1
        return value

    def take(self, count: int) -> bytes:
        if count < 0 or self.pos + count > len(self._data):
            raise WasmError(f"unexpected end of input at offset {self.pos}")
        chunk = self._data[self.pos:self.pos + count]
        self.pos += count
        return chunk

    def sub(self, count: int) -> "_Reader":
        return _Reader(self.take(count))

    def _uleb(self, bits: int) -> int:
        result = shift = 0
        while True:
            b = self.byte()
            result |= (b & 0x7F) << shift
            shift += 7
            if not b & 0x80:
                break
            if shift >= bits:
                raise WasmError("integer representation too long")
        if result >= 1 << bits:
            raise WasmError("integer too large")
        return result

    def _sleb(self, bits: int) -> int:
        result = shift = 0
        while True:
            b = self.byte()
            result |= (b & 0x7F) << shift
            shift += 7
            if not b & 0x80:
                break
            if shift >= bits:
                raise WasmError("integer representation too long")
        if b & 0x40:
            result -= 1 << shift
        if not -(1 << (bits - 1)) <= result < 1 << (bits - 1):
            raise WasmError("integer too large")
        return result

    def u32(self) -> int:
        return self._uleb(32)

    def u64(self) -> int:
        return self._uleb(64)

    def s32(self) -> int:
        return self._sleb(32)

    def s33(self) -> int:
        return self._sleb(33)

    def s64(self) -> int:
        return self._sleb(64)

    def name(self) -> str:
        raw = self.take(self.u32())
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise WasmError("malformed UTF-8 encoding") from exc

    def expect_end(self) -> None:
        if not self.at_end():
            raise WasmError("section size mismatch: unexpected data at the end of the section")


def _read_valtype(r: _Reader) -> ValType:
    b = r.byte()
    try:
        return ValType(b)
    except ValueError:
        raise WasmError(f"invalid value type 0x{b:02x}") from None


def _read_block_type(r: _Reader) -> Union[None, ValType, int]:
    b = r.peek()
    if b == 0x40:
        r.byte()
        return None
    if b in _VALTYPE_BYTES:
        return ValType(r.byte())
    index = r.s33()
    if index < 0:
        raise WasmError("invalid block type")
    return index


def _read_memarg(r: _Reader) -> tuple[int, int, int]:
    align = r.u32()
    memory = 0
    if align & 0x40:
        align &= ~0x40
        memory = r.u32()
    offset = r.u64()
    return (align, offset, memory)


def _read_limits(r: _Reader) -> None:
    flags = r.byte()
    read = r.u64 if flags & 0x04 else r.u32
    read()
    if flags & 0x01:
        read()


def _numeric_names() -> dict[int, str]:
    cmp_i = ["eqz", "eq", "ne", "lt_s", "lt_u", "gt_s", "gt_u", "le_s", "le_u", "ge_s", "ge_u"]
    cmp_f = ["eq", "ne", "lt", "gt", "le", "ge"]
    arith_i = ["clz", "ctz", "popcnt", "add", "sub", "mul", "div_s", "div_u", "rem_s",
               "rem_u", "and", "or", "xor", "shl", "shr_s", "shr_u", "rotl", "rotr"]
    arith_f = ["abs", "neg", "ceil", "floor", "trunc", "nearest", "sqrt", "add", "sub",
               "mul", "div", "min", "max", "copysign"]
    conversions = [
        "i32.wrap_i64", "i32.trunc_f32_s", "i32.trunc_f32_u", "i32.trunc_f64_s",
        "i32.trunc_f64_u", "i64.extend_i32_s", "i64.extend_i32_u", "i64.trunc_f32_s",
        "i64.trunc_f32_u", "i64.trunc_f64_s", "i64.trunc_f64_u", "f32.convert_i32_s",
        "f32.convert_i32_u", "f32.convert_i64_s", "f32.convert_i64_u", "f32.demote_f64",
        "f64.convert_i32_s", "f64.convert_i32_u", "f64.convert_i64_s", "f64.convert_i64_u",
        "f64.promote_f32", "i32.reinterpret_f32", "i64.reinterpret_f64",
        "f32.reinterpret_i32", "f64.reinterpret_i64", "i32.extend8_s", "i32.extend16_s",
        "i64.extend8_s", "i64.extend16_s", "i64.extend32_s",
    ]
    names = (
        [f"i32.{n}" for n in cmp_i] + [f"i64.{n}" for n in cmp_i]
        + [f"f32.{n}" for n in cmp_f] + [f"f64.{n}" for n in cmp_f]
        + [f"i32.{n}" for n in arith_i] + [f"i64.{n}" for n in arith_i]
        + [f"f32.{n}" for n in arith_f] + [f"f64.{n}" for n in arith_f]
        + conversions
    )
    return dict(enumerate(names, start=0x45))


_NO_IMMEDIATE = {
    0x00: "unreachable", 0x01: "nop", 0x05: "else", 0x0A: "throw_ref", 0x0B: "end",
    0x0F: "return", 0x19: "catch_all", 0x1A: "drop", 0x1B: "select",
    0xD1: "ref.is_null", 0xD3: "ref.as_non_null", 0xD5: "ref.eq",
    **_numeric_names(),
}

_ONE_INDEX = {
    0x07: "catch", 0x08: "throw", 0x09: "rethrow", 0x0C: "br", 0x0D: "br_if",
    0x10: "call", 0x12: "return_call", 0x14: "call_ref", 0x15: "return_call_ref",
    0x18: "delegate", 0x20: "local.get", 0x21: "local.set", 0x22: "local.tee",
    0x23: "global.get", 0x24: "global.set", 0x25: "table.get", 0x26: "table.set",
    0x3F: "memory.size", 0x40: "memory.grow", 0xD2: "ref.func",
    0xD4: "br_on_null", 0xD6: "br_on_non_null",
}

_BLOCKS = {0x02: "block", 0x03: "loop", 0x04: "if", 0x06: "try"}

_MEMORY = dict(enumerate([
    "i32.load", "i64.load", "f32.load", "f64.load", "i32.load8_s", "i32.load8_u",
    "i32.load16_s", "i32.load16_u", "i64.load8_s", "i64.load8_u", "i64.load16_s",
    "i64.load16_u", "i64.load32_s", "i64.load32_u", "i32.store", "i64.store",
    "f32.store", "f64.store", "i32.store8", "i32.store16", "i64.store8",
    "i64.store16", "i64.store32",
], start=0x28))

# Number of index immediates for each 0xFC-prefixed instruction.
_MISC = [
    ("i32.trunc_sat_f32_s", 0), ("i32.trunc_sat_f32_u", 0), ("i32.trunc_sat_f64_s", 0),
    ("i32.trunc_sat_f64_u", 0), ("i64.trunc_sat_f32_s", 0), ("i64.trunc_sat_f32_u", 0),
    ("i64.trunc_sat_f64_s", 0), ("i64.trunc_sat_f64_u", 0), ("memory.init", 2),
    ("data.drop", 1), ("memory.copy", 2), ("memory.fill", 1), ("table.init", 2),
    ("elem.drop", 1), ("table.copy", 2), ("table.grow", 1), ("table.size", 1),
    ("table.fill", 1),
]


def _read_simd(r: _Reader) -> Operator:
    sub = r.u32()
    name = f"simd.{sub}"
    if sub <= 11 or sub in (92, 93):
        return Operator(name, _read_memarg(r))
    if sub in (12, 13):
        return Operator(name, (r.take(16),))
    if 21 <= sub <= 34:
        return Operator(name, (r.byte(),))
    if 84 <= sub <= 91:
        return Operator(name, (*_read_memarg(r), r.byte()))
    return Operator(name)


def _read_operator(r: _Reader) -> Operator:
    op = r.byte()
    if op in _NO_IMMEDIATE:
        return Operator(_NO_IMMEDIATE[op])
    if op in _ONE_INDEX:
        return Operator(_ONE_INDEX[op], (r.u32(),))
    if op in _BLOCKS:
        return Operator(_BLOCKS[op], (_read_block_type(r),))
    if op in _MEMORY:
        return Operator(_MEMORY[op], _read_memarg(r))
    if op == 0x0E:
        targets = tuple(r.u32() for _ in range(r.u32()))
        return Operator("br_table", (targets, r.u32()))
    if op in (0x11, 0x13):
        name = "call_indirect" if op == 0x11 else "return_call_indirect"
        type_index = r.u32()
        return Operator(name, (type_index, r.u32()))
    if op == 0x1C:
        types = tuple(_read_valtype(r) for _ in range(r.u32()))
        return Operator("select", (types,))
    if op == 0x41:
        return Operator("i32.const", (r.s32(),))
    if op == 0x42:
        return Operator("i64.const", (r.s64(),))
    if op == 0x43:
        return Operator("f32.const", struct.unpack("<f", r.take(4)))
    if op == 0x44:
        return Operator("f64.const", struct.unpack("<d", r.take(8)))
    if op == 0xD0:
        return Operator("ref.null", (r.s33(),))
    if op == 0xFC:
        sub = r.u32()
        if sub >= len(_MISC):
            raise WasmError(f"unknown 0xfc subopcode: 0x{sub:x}")
        name, count = _MISC[sub]
        return Operator(name, tuple(r.u32() for _ in range(count)))
    if op == 0xFD:
        return _read_simd(r)
    raise WasmError(f"illegal opcode: 0x{op:02x}")


@dataclass
class Module:
    """The parts of a WebAssembly module relevant for analysis."""

    custom_sections: dict[str, bytes] = field(default_factory=dict)
    start_section: Optional[int] = None
    function_sections: list[int] = field(default_factory=list)
    type_sections: list[FuncType] = field(default_factory=list)
    import_sections: list[Import] = field(default_factory=list)
    code_sections: list[list[Operator]] = field(default_factory=list)

    def has_function_name(self, name: str) -> bool:
        """Whether a function name in the ``name`` custom section contains ``name``."""
        data = self.custom_sections.get("name")
        if data is None:
            raise WasmError("Custom section 'name' not found.")
        r = _Reader(data)
        while not r.at_end():
            sub_id = r.byte()
            sub = r.sub(r.u32())
            if sub_id != 1:
                continue
            for _ in range(sub.u32()):
                sub.u32()
                if name in sub.name():
                    return True
        return False

    def function_type_index(self, function: FuncType) -> Optional[int]:
        """Index of the first matching signature in the type section."""
        return next(
            (i for i, ty in enumerate(self.type_sections) if ty == function), None
        )

    def function_import_index(self, name: str) -> Optional[int]:
        """Position of the named import among the imported functions."""
        functions = (entry for entry in self.import_sections if entry.kind == "func")
        return next(
            (i for i, entry in enumerate(functions) if entry.name == name), None
        )

    def functions_by_type(self, function_type: FuncType) -> list[list[Operator]]:
        """Bodies of all defined functions with the given signature."""
        type_index = self.function_type_index(function_type)
        if type_index is None:
            return []
        bodies = []
        for position, index in enumerate(self.function_sections):
            if index != type_index:
                continue
            if position >= len(self.code_sections):
                raise WasmError("Requested function not found in code section.")
            bodies.append(list(self.code_sections[position]))
        return bodies


def _parse_types(r: _Reader, module: Module) -> None:
    for _ in range(r.u32()):
        form = r.byte()
        if form in (0x4E, 0x4F, 0x50, 0x5E, 0x5F):
            raise WasmError("gc types are not supported")
        if form != 0x60:
            raise WasmError(f"invalid leading byte (0x{form:x}) for type definition")
        params = [_read_valtype(r) for _ in range(r.u32())]
        results = [_read_valtype(r) for _ in range(r.u32())]
        module.type_sections.append(FuncType(params, results))


def _parse_imports(r: _Reader, module: Module) -> None:
    for _ in range(r.u32()):
        mod = r.name()
        name = r.name()
        kind = r.byte()
        if kind == 0x00:
            module.import_sections.append(Import(mod, name, "func", r.u32()))
        elif kind == 0x01:
            ref = r.byte()
            if ref in (0x63, 0x64):
                r.s33()
            elif ref not in (0x70, 0x6F):
                raise WasmError(f"invalid reference type 0x{ref:02x}")
            _read_limits(r)
            module.import_sections.append(Import(mod, name, "table"))
        elif kind == 0x02:
            _read_limits(r)
            module.import_sections.append(Import(mod, name, "memory"))
        elif kind == 0x03:
            _read_valtype(r)
            r.byte()
            module.import_sections.append(Import(mod, name, "global"))
        elif kind == 0x04:
            r.byte()
            module.import_sections.append(Import(mod, name, "tag", r.u32()))
        else:
            raise WasmError(f"invalid external kind 0x{kind:02x}")


def _parse_code(r: _Reader, module: Module) -> None:
    for _ in range(r.u32()):
        body = r.sub(r.u32())
        for _ in range(body.u32()):
            body.u32()
            _read_valtype(body)
        operators = []
        while not body.at_end():
            operators.append(_read_operator(body))
        module.code_sections.append(operators)


def parse_module(code: bytes) -> Module:
    """Parse a WebAssembly core module binary."""
    r = _Reader(code)
    if r.take(4) != b"\0asm":
        raise WasmError("magic header not detected: bad magic number")
    num, layer = struct.unpack("<HH", r.take(4))
    if layer == 1:
        raise WasmError("Unsupported component section.")
    if layer != 0 or num != 1:
        raise WasmError(f"unknown binary version: 0x{num:x}")

    module = Module()
    while not r.at_end():
        section_id = r.byte()
        section = r.sub(r.u32())
        if section_id == 0:
            name = section.name()
            module.custom_sections[name] = section.remaining()
            continue
        if section_id == 1:
            _parse_types(section, module)
        elif section_id == 2:
            _parse_imports(section, module)
        elif section_id == 3:
            module.function_sections.extend(section.u32() for _ in range(section.u32()))
        elif section_id == 8:
            module.start_section = section.u32()
        elif section_id == 10:
            _parse_code(section, module)
        elif section_id > 13:
            raise WasmError(f"malformed section id: {section_id}")
        else:
            continue
        section.expect_end()
    return module