"""Interactive sort-and-inspect loop over the computed payroll."""

from __future__ import annotations

import sys
from collections.abc import Callable, Sequence

from payrolltax.services.payroll import PayrollRecord, SortOrder, find_records

from .rendering import render_breakdown, render_menu, render_table

PROMPT = "==> "
FAREWELL = "Goodbye."
BREAKDOWN_PROMPT = (
    "Enter an employees ID number or name to see the breakdown of their taxes. "
    "Enter anything else to go back to sorting menu."
)

InputFn = Callable[[str], str]
OutputFn = Callable[[str], None]


def clear_screen() -> None:
    """Clear the terminal when attached to one."""

    if sys.stdout.isatty():
        sys.stdout.write("\033[2J\033[H")
        sys.stdout.flush()


class PayrollConsole:
    """Menu loop that sorts the payroll and shows per-employee derivations.

    Input, output and screen clearing are injectable so the loop can be driven
    without a terminal.
    """

    def __init__(
        self,
        records: Sequence[PayrollRecord],
        *,
        input_fn: InputFn | None = None,
        output_fn: OutputFn | None = None,
        clear_fn: Callable[[], None] = clear_screen,
    ) -> None:
        self.records = tuple(records)
        self._input = input_fn or input
        self._output = output_fn or print
        self._clear = clear_fn

    def run(self) -> None:
        """Prompt for sort orders until the user enters anything unrecognised."""

        while True:
            self._output(render_menu())
            answer = self._input(PROMPT).strip()
            self._output("\n")
            self._clear()

            try:
                order = SortOrder(answer)
            except ValueError:
                self._output(FAREWELL)
                return

            self.records = order.apply(self.records)
            self._output(render_table(self.records))
            self.show_breakdown()

    def show_breakdown(self) -> None:
        """Ask for an id or name and print the derivation of every match."""

        self._output("\n\n")
        self._output(BREAKDOWN_PROMPT)
        answer = self._input(PROMPT).strip()
        self._clear()

        for record in find_records(self.records, answer):
            self._output(render_breakdown(record))
            self._input("Press enter...")
        self._clear()


__all__ = ["PayrollConsole", "clear_screen"]
