"""Demo commands shipped with the ``command-bridge-demo`` entry point."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass

from .descriptor import command, descriptor_of
from .registry import CommandRegistry


@dataclass(slots=True, frozen=True)
class Color:
    """RGB color with channels in the range 0.0 to 1.0."""

    red: float
    green: float
    blue: float


SUPPORTED_COLORS = {
    "red": Color(red=1.0, green=0.0, blue=0.0),
    "green": Color(red=0.0, green=1.0, blue=0.0),
    "blue": Color(red=0.0, green=0.0, blue=1.0),
}


@command
def noop() -> None:
    return None


@command
def greeting(name: str, is_formal: bool) -> str:
    return f"Hello {'Mr/Ms ' if is_formal else ''}{name}!"


@command
def greetings(names: list[str]) -> list[str]:
    return [f"Hello {name}!" for name in names]


@command(raises=ValueError)
async def delayed_greeting(name: str, seconds: float) -> str:
    if seconds < 0.0:
        raise ValueError("Seconds must be non-negative")
    await asyncio.sleep(seconds)
    return f"... Hello {name}!"


@command
def optionals(value: str | None) -> str | None:
    if value is None:
        return None
    return f"Got: {value}"


@command(raises=ValueError)
def pick_color(name: str) -> Color:
    color = SUPPORTED_COLORS.get(name)
    if color is None:
        raise ValueError(f"{name} is not a supported color")
    return color


DEMO_COMMANDS = (noop, greeting, greetings, delayed_greeting, optionals, pick_color)


def register_demo_commands(registry: CommandRegistry) -> None:
    """Register every demo command."""
    for handler in DEMO_COMMANDS:
        registry.register(descriptor_of(handler))


def build_demo_registry() -> CommandRegistry:
    """Return a frozen registry holding the demo commands."""
    registry = CommandRegistry()
    register_demo_commands(registry)
    registry.freeze()
    return registry
