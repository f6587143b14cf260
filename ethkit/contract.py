"""Builders for small Solidity test contracts and their event signatures."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Optional

from .structs import keccak256

_PRAGMAS = "pragma solidity ^0.5.5;\npragma experimental ABIEncoderV2;\n"


def _keccak_hex(text: str) -> str:
    return "0x" + bytes(keccak256(text.encode())).hex()


def method_sig(name: str) -> bytes:
    """Return the 4-byte selector of a function that takes no arguments."""
    return bytes(keccak256((name + "()").encode()))[:4]


@dataclass
class _EventField:
    typ: str
    indexed: bool


@dataclass
class Event:
    """A contract event with typed, optionally indexed fields."""

    name: str
    fields: list[_EventField] = field(default_factory=list)

    def add(self, typ: str, indexed: bool) -> "Event":
        """Append a field and return the event for chaining."""
        self.fields.append(_EventField(typ, bool(indexed)))
        return self

    def sig(self) -> str:
        """Return the hex Keccak-256 hash of the event signature."""
        signature = f"{self.name}({','.join(f.typ for f in self.fields)})"
        return _keccak_hex(signature)

    def _declaration(self) -> str:
        args = []
        for index, fld in enumerate(self.fields):
            arg = fld.typ
            if fld.indexed:
                arg += " indexed"
            args.append(f"{arg} val_{index}")
        return f"event {self.name}({', '.join(args)});"

    def _setter(self) -> str:
        params = []
        body = []
        for index, fld in enumerate(self.fields):
            typ = fld.typ
            if typ == "string" or "[" in typ:
                typ += " memory"
            params.append(f"{typ} val_{index}")
            body.append(f"val_{index}")
        return (
            f"function setter{self.name}({', '.join(params)}) public payable {{\n"
            f"emit {self.name}({', '.join(body)});\n"
            "}"
        )


def new_event(name: str, *args) -> Event:
    """Create an event from alternating (type, indexed) arguments."""
    if len(args) % 2 != 0:
        raise ValueError("it should be even")
    event = Event(name)
    for typ, indexed in zip(args[::2], args[1::2]):
        if not isinstance(typ, str):
            raise TypeError(f"field type must be a string, not {type(typ).__name__}")
        event.add(typ, indexed)
    return event


class Contract:
    """A Solidity contract named Sample assembled from code fragments."""

    def __init__(self) -> None:
        self._events: list[Event] = []
        self._callbacks: list[Callable[[], str]] = []

    def add_callback(self, callback: Callable[[], str]) -> None:
        """Append a function producing one fragment of the contract body."""
        self._callbacks.append(callback)

    def add_event(self, event: Event) -> None:
        """Declare an event and a payable setter function that emits it."""
        self.add_callback(event._declaration)
        self.add_callback(event._setter)
        self._events.append(event)

    def get_event(self, name: str) -> Optional[Event]:
        """Return the event called name, or None."""
        return next((event for event in self._events if event.name == name), None)

    def render(self) -> str:
        """Return the Solidity source of the contract."""
        body = "".join(callback() + "\n" for callback in self._callbacks)
        return _PRAGMAS + "\ncontract Sample {\n" + body + "}"

    def add_constructor(self, *args: str) -> None:
        """Add public state variables set from constructor arguments."""

        def fragment() -> str:
            decls = "".join(f"{arg} public val_{index};\n" for index, arg in enumerate(args))
            inputs = ",".join(f"{arg} local_{index}" for index, arg in enumerate(args))
            body = "".join(f"val_{index} = local_{index};\n" for index in range(len(args)))
            return decls + "constructor(" + inputs + ") public {\n" + body + "}"

        self.add_callback(fragment)

    def add_dual_caller(self, func_name: str, *args: str) -> None:
        """Add a view function that returns the values it is given."""

        def fragment() -> str:
            names = [f"val_{index}" for index in range(len(args))]
            params = ",".join(f"{typ} {name}" for typ, name in zip(args, names))
            return (
                f"function {func_name}({params}) public view returns ({','.join(args)}) {{\n"
                f"return ({','.join(names)});\n"
                "}"
            )

        self.add_callback(fragment)

    def add_output_caller(self, func_name: str) -> None:
        """Add a view function without inputs that returns 1."""
        self.add_callback(
            lambda: f"function {func_name} () public view returns (uint256) {{\n"
            "\t\t\treturn 1;\n"
            "\t\t}"
        )

    def emit_event(self, func_name: str, name: str, *args: str) -> None:
        """Add a payable function that emits a declared event with fixed arguments."""
        if self.get_event(name) is None:
            raise ValueError(f"event {name} does not exists")
        self.add_callback(
            lambda: f"function {func_name}() public payable {{\n"
            f"emit {name}({', '.join(args)});\n"
            "}"
        )