from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

import sympy as sp
from sympy.core.relational import Relational

from .config import ConversionOptions
from .equation import Equation
from .errors import ConversionError, InvalidEvent
from .model import Event, Model
from .symbols import get_substitutions, substitute, symbol_name


@dataclass(frozen=True)
class CompiledEvent:
    """Continuous event: when ``trigger.lhs`` crosses ``trigger.rhs`` apply `assignments`."""

    trigger: Equation
    assignments: Tuple[Equation, ...]
    name: str = ""


class EventCompiler:
    """Compile model events against the states of an assembled network."""

    def __init__(
        self,
        model: Model,
        states: Sequence[sp.Expr],
        options: Optional[ConversionOptions] = None,
        subs: Optional[Dict[sp.Expr, sp.Expr]] = None,
    ) -> None:
        self.model = model
        self.options = options or ConversionOptions()
        self.subs = subs if subs is not None else get_substitutions(model, self.options.iv)
        self.interpreter = self.options.interpreter()
        self._states = {symbol_name(x): x for x in states}

    def _trigger(self, event: Event) -> Equation:
        expr = self.interpreter.interpret(event.trigger)
        if not isinstance(expr, Relational):
            raise InvalidEvent(
                f"Event trigger must be a binary relation between two expressions; got `{sp.sstr(expr)}`"
            )
        lhs, rhs = expr.args
        return Equation(substitute(lhs, self.subs), substitute(rhs, self.subs))

    def compile_event(self, event: Event, name: str = "") -> CompiledEvent:
        try:
            trigger = self._trigger(event)
            assignments: List[Equation] = []
            for eva in event.assignments:
                var = self._states.get(eva.variable)
                if var is None:
                    raise InvalidEvent(f"Event assignment target '{eva.variable}' is not a state of the system")
                value = substitute(self.interpreter.interpret(eva.math), self.subs)
                assignments.append(Equation(var, value))
        except ConversionError as exc:
            if exc.element is None:
                exc.element = name or event.id
            raise
        return CompiledEvent(trigger, tuple(assignments), name or event.id or "")

    def compile_all(self) -> List[CompiledEvent]:
        return [self.compile_event(ev, name) for name, ev in self.model.events.items()]


def get_events(
    model: Model,
    states: Sequence[sp.Expr],
    options: Optional[ConversionOptions] = None,
) -> List[CompiledEvent]:
    """Compile all events of `model`; assignment targets must be among `states`."""
    return EventCompiler(model, states, options).compile_all()


__all__ = ["CompiledEvent", "EventCompiler", "get_events"]
